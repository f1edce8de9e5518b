from pydantic import BaseModel, StrictStr


class Credentials(BaseModel):
    email: StrictStr = ""
    password: StrictStr = ""


class TokenResponse(BaseModel):
    token: str
