"""
Location detection: reverse-geocode coordinates and map the place name
onto one of the seeded districts.

Matching is a normalized substring/equality heuristic, not a similarity
score. The first district (in primary-key order) that matches wins.
"""

import logging
import re
from typing import Iterable, Optional

import requests
from sqlalchemy.orm import Session

from ..config import settings
from ..database.models import District
from ..utils.errors import BadRequestError
from ..utils.geocoder import GeocoderUnavailable, pick_place_name

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_PARENTHETICAL = re.compile(r"\(([^)]+)\)")

# Abbreviations used in the English short forms of district names
ABBREVIATIONS = {
    "chh.": "chhatrapati",
}

UNAVAILABLE_MESSAGE = "Location service temporarily unavailable. Please select manually."
NO_NAME_MESSAGE = "External geocoding failed to identify the region name."


def normalize_name(name: str) -> str:
    """Lower-case and drop everything except ASCII letters and digits."""
    return _NON_ALNUM.sub("", (name or "").lower())


def english_short_form(district_name: str) -> Optional[str]:
    """Content of the first parenthesised group, e.g. "Chh. Sambhajinagar"."""
    found = _PARENTHETICAL.search(district_name or "")
    return found.group(1) if found else None


def expand_abbreviations(text: str) -> str:
    words = [ABBREVIATIONS.get(word.lower(), word) for word in text.split()]
    return " ".join(words)


def comparison_forms(district_name: str):
    """
    (short forms, full form) for one stored district name.
    Short forms are the normalized parenthetical and its abbreviation-expanded
    variant; empty forms are dropped.
    """
    short = english_short_form(district_name)
    short_forms = []
    if short:
        for form in (normalize_name(short), normalize_name(expand_abbreviations(short))):
            if form and form not in short_forms:
                short_forms.append(form)
    return short_forms, normalize_name(district_name)


def match_district(place_name: str, districts: Iterable[District]) -> Optional[District]:
    candidate = normalize_name(place_name)
    if not candidate:
        return None

    for district in districts:
        short_forms, full_form = comparison_forms(district.district_name)
        if any(form in candidate for form in short_forms):
            return district
        if candidate == full_form:
            return district
    return None


def detect_location(db: Session, geocoder, lat: Optional[str], lng: Optional[str]) -> dict:
    """
    Raises:
        BadRequestError: if either coordinate is missing
        GeocoderUnavailable: if the reverse geocoder fails
    """
    if not lat or not lng:
        raise BadRequestError(error="Latitude and longitude parameters are required")

    try:
        address = geocoder.reverse(lat, lng)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Error detecting location: {e}")
        raise GeocoderUnavailable(str(e)) from e

    place_name = pick_place_name(address)
    if not place_name:
        return {
            "detected": False,
            "detectedDistrictName": "External Geocoding Failure",
            "message": NO_NAME_MESSAGE,
        }

    districts = (
        db.query(District)
        .filter(District.state_code == settings.SUPPORTED_STATE_CODE)
        .order_by(District.id)
        .all()
    )
    match = match_district(place_name, districts)

    if match:
        logger.info(f"📍 '{place_name}' matched to {match.district_name}")
        return {
            "state": match.state_code,
            "district": match.district_name,
            "detected": True,
        }

    logger.info(f"📍 '{place_name}' did not match any known district")
    return {
        "detected": False,
        "detectedDistrictName": place_name,
        "message": f"Location detected but could not map '{place_name}' to a known district.",
    }
