from pydantic import BaseModel, EmailStr


class UserContext(BaseModel):
    email: EmailStr
    display_name: str = "Guest User"
