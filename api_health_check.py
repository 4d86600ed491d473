import os
import requests

BASE_URL = os.getenv("DASHBOARD_API_URL", "http://localhost:3000")

print("=" * 60)
print("API HEALTH CHECK")
print("=" * 60)

try:
    health = requests.get(f"{BASE_URL}/api/health", timeout=10)
    print(f"\n✅ Health: {health.status_code} {health.json()}")

    states = requests.get(f"{BASE_URL}/api/states", timeout=10).json()
    print(f"\n📋 States: {[s['stateCode'] for s in states]}")

    state = states[0]["stateCode"]
    districts = requests.get(f"{BASE_URL}/api/districts", params={"state": state}, timeout=10).json()
    print(f"  - {state}: {len(districts)} districts")

    if districts:
        response = requests.get(
            f"{BASE_URL}/api/district-data",
            params={"state": state, "district": districts[0]},
            timeout=20
        )
        print(f"\n✅ district-data status: {response.status_code}")

        if response.status_code == 200:
            data = response.json()
            current = data["current"]
            state_avg = data["comparison"]["stateAvg"]
            print(f"\n🎯 {data['district']} ({data.get('lastUpdated')})")
            print(f"  - Households worked: {current['householdsWorked']}")
            print(f"  - Avg days: {current['avgDays']} | Avg wage: {current['avgWage']}")
            print(f"  - State average: {state_avg['value']} ({state_avg['position']})")

            print("\n" + "=" * 60)
            print("✅ API TEST PASSED")
            print("=" * 60)
        else:
            print(f"\n❌ Error: {response.status_code}")
            print(response.text)

except Exception as e:
    print(f"\n❌ Test Failed: {str(e)}")
