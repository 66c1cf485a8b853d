from fastapi import Depends
from sqlalchemy.orm import Session

from streetsafety.core.config import Settings, get_settings
from streetsafety.db.session import get_db
from streetsafety.services.crimes.engine import CrimeRecordEngine
from streetsafety.services.crimes.severity import get_severity_classifier
from streetsafety.services.crimes.store import CrimeStore


def get_crime_engine(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CrimeRecordEngine:
    """Dependency for getting a crime record engine bound to the request session"""
    return CrimeRecordEngine(
        CrimeStore(db),
        classifier=get_severity_classifier(),
        vote_max_retries=settings.vote_max_retries,
    )
