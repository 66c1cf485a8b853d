from streetsafety.db.base import Base  # noqa
from streetsafety.models.crime_report import CrimeReport  # noqa
from streetsafety.models.crime_vote import CrimeVote  # noqa
from streetsafety.models.user_account import UserAccount  # noqa

__all__ = ["Base", "CrimeReport", "CrimeVote", "UserAccount"]
