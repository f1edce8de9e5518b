from fastapi import APIRouter, Depends, status

from ..dependencies import get_authenticator
from ..schemas import Credentials, TokenResponse
from ..services.auth import Authenticator

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(payload: Credentials, auth: Authenticator = Depends(get_authenticator)):
    return TokenResponse(token=auth.register(payload.email, payload.password))


@router.post("/login", response_model=TokenResponse)
def login(payload: Credentials, auth: Authenticator = Depends(get_authenticator)):
    return TokenResponse(token=auth.login(payload.email, payload.password))
