"""
Synthetic MGNREGA data generator.

This does NOT pull from data.gov.in. It seeds the district reference list
for one state and fills in placeholder performance figures for the target
month so the dashboard has something to show.
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from ..config import settings
from ..database.models import District, Performance

logger = logging.getLogger(__name__)

DATA_SOURCE = "data.gov.in (Simulated)"

MAHARASHTRA_DISTRICTS = [
    'अहमदनगर (Ahmednagar)', 'अकोला (Akola)', 'अमरावती (Amravati)',
    'छत्रपति संभाजीनगर (Chh. Sambhajinagar)',
    'भंडारा (Bhandara)', 'बुलढाणा (Buldhana)',
    'चंद्रपूर (Chandrapur)', 'धुले (Dhule)', 'गड़चिरोली (Gadchiroli)',
    'गोंदिया (Gondia)', 'हिंगोली (Hingoli)', 'जलगांव (Jalgaon)',
    'जालना (Jalna)', 'कोल्हापुर (Kolhapur)', 'लातूर (Latur)',
    'मुंबई उपनगर (Mumbai Sub)', 'नागपुर (Nagpur)', 'नांदेड़ (Nanded)',
    'नंदुरबार (Nandurbar)', 'नासिक (Nashik)', 'धाराशिव (Dharashiv)',
    'परभणी (Parbhani)', 'पुणे (Pune)', 'रायगड़ (Raigad)',
    'रत्नागिरी (Ratnagiri)', 'सांगली (Sangli)', 'सतारा (Satara)',
    'सिंधुदुर्ग (Sindhudurg)', 'सोलापुर (Solapur)', 'ठाणे (Thane)',
    'वर्धा (Wardha)', 'वाशिम (Washim)', 'यवतमाल (Yavatmal)',
    'पालघर (Palghar)',
]


def target_month(today: Optional[date] = None) -> date:
    """
    First day of the previous calendar month.
    The running month is always incomplete, so data is reported one month behind.
    """
    today = today or date.today()
    if today.month == 1:
        return date(today.year - 1, 12, 1)
    return date(today.year, today.month - 1, 1)


def unique_names(names):
    """Drop duplicates, keeping first-seen order."""
    return list(dict.fromkeys(names))


class SyntheticDataGenerator:
    """Seeds districts and one month of placeholder performance rows per district."""

    def __init__(self, database, rng: random.Random = None, max_workers: int = None,
                 state_code: str = None, state_name: str = None, districts=None):
        self.database = database
        self.rng = rng or random.Random()
        self.max_workers = max_workers or settings.SEED_WORKERS
        self.state_code = state_code or settings.SUPPORTED_STATE_CODE
        self.state_name = state_name or settings.SUPPORTED_STATE_NAME
        self.districts = unique_names(districts if districts is not None else MAHARASHTRA_DISTRICTS)

    def seed_districts(self) -> int:
        """Insert any missing district reference rows. Returns the number inserted."""
        db = self.database.session()
        try:
            existing = {
                name for (name,) in db.query(District.district_name)
                .filter(District.state_code == self.state_code)
            }
            missing = [name for name in self.districts if name not in existing]
            if not missing:
                logger.info(f"✅ {len(existing)} districts already present for {self.state_code}")
                return 0

            db.add_all([
                District(state_code=self.state_code, state_name=self.state_name, district_name=name)
                for name in missing
            ])
            db.commit()
            logger.info(f"✅ Seeded {len(missing)} districts for {self.state_code}.")
            return len(missing)
        except IntegrityError:
            db.rollback()
            logger.warning("⚠️ District seed data already partially exists. Skipping insert.")
            return 0
        finally:
            db.close()

    def build_record(self, district_name: str, month: date) -> Performance:
        rng = self.rng
        households = int(60000 + rng.random() * 30000)
        active_workers = int(households * (0.7 + rng.random() * 0.2))
        women_workers = int(active_workers * (0.55 + rng.random() * 0.15))
        avg_days = round(35 + rng.random() * 20, 1)

        return Performance(
            state_code=self.state_code,
            district_name=district_name,
            data_month=month,
            job_cards_issued=int(households * (1.3 + rng.random() * 0.3)),
            households_worked=households,
            active_workers=active_workers,
            women_workers=women_workers,
            sc_workers=int(active_workers * 0.2),
            st_workers=int(active_workers * 0.15),
            avg_days_provided=avg_days,
            total_persondays=int(households * avg_days),
            avg_wage=round(285 + rng.random() * 50, 2),
            completed_works=int(800 + rng.random() * 600),
            ongoing_works=int(300 + rng.random() * 400),
            total_expenditure=round(households * 300 * (35 + rng.random() * 20), 2),
            updated_at=datetime.now(),
            data_source=DATA_SOURCE,
        )

    def generate_month(self, district_name: str, month: date) -> bool:
        """Insert the month's row for one district if absent. Returns True if a row was written."""
        db = self.database.session()
        try:
            existing = db.query(Performance.id).filter(
                Performance.state_code == self.state_code,
                Performance.district_name == district_name,
                Performance.data_month == month,
            ).first()
            if existing:
                return False

            db.add(self.build_record(district_name, month))
            db.commit()
            return True
        except IntegrityError:
            db.rollback()
            logger.warning(f"⚠️ {district_name} {month:%Y-%m} already written by another worker")
            return False
        finally:
            db.close()

    def generate_for_state(self, month: Optional[date] = None) -> int:
        """
        Fill in the month for every district of the state, one task per district.
        A failing district is logged and does not affect the others.
        """
        month = month or target_month()
        db = self.database.session()
        try:
            names = [
                name for (name,) in db.query(District.district_name)
                .filter(District.state_code == self.state_code)
                .order_by(District.id)
            ]
        finally:
            db.close()

        if not names:
            logger.warning(f"⚠️ No districts found for {self.state_code}, nothing to generate")
            return 0

        logger.info(f"📊 Generating {month:%b %Y} performance data for {len(names)} districts...")
        inserted = 0
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {pool.submit(self.generate_month, name, month): name for name in names}
            for future in as_completed(futures):
                try:
                    if future.result():
                        inserted += 1
                except Exception as e:
                    logger.error(f"❌ Generation failed for {futures[future]}: {e}")

        logger.info(f"✅ {inserted} new performance rows for {month:%b %Y}")
        return inserted

    def initialize(self, month: Optional[date] = None) -> dict:
        """Startup seeding: district list first, then the target month's figures."""
        logger.info(f"📥 Checking seed data for {self.state_code}...")
        districts_inserted = self.seed_districts()
        performance_inserted = self.generate_for_state(month)
        return {
            "districts_inserted": districts_inserted,
            "performance_inserted": performance_inserted,
        }
