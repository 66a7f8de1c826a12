from pydantic import BaseModel, Field


class RegisterUserRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50, description="Display name")
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", description="Contact email")


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=50)
    bio: str | None = Field(None, max_length=500)
