from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from streetsafety.db.session import get_db
from streetsafety.schemas.user import LoginResponse, MessageResponse, UserLogin, UserRegister
from streetsafety.services.accounts import authenticate_user, register_user

router = APIRouter(tags=["Accounts"])


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    """Register a new user account"""
    register_user(db, payload.username, payload.email, payload.password)
    return MessageResponse(message="User registered")


@router.post("/login", response_model=LoginResponse)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    """
    Check credentials.

    The returned email is what the client sends as `userEmail` when voting.
    No session token is issued.
    """
    user = authenticate_user(db, payload.email, payload.password)
    return LoginResponse(message="Login successful", user_email=user.email)
