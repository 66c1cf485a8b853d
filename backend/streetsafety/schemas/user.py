from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class UserRegister(BaseModel):
    username: str = Field(..., max_length=150)
    email: str = Field(..., max_length=255)
    password: str


class UserLogin(BaseModel):
    email: str
    password: str


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    message: str
    user_email: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True
