import secrets
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from pydantic import BaseModel
from app.config import JWT_SECRET, JWT_ALGORITHM, create_access_token, settings

router = APIRouter(tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class AdminLogin(BaseModel):
    user_id: str
    password: str


def verify_admin(user_id: str, password: str) -> bool:
    """Check credentials against the configured dashboard administrator."""
    user_ok = secrets.compare_digest(user_id.encode("utf-8"), settings.admin_user_id.encode("utf-8"))
    password_ok = secrets.compare_digest(password.encode("utf-8"), settings.admin_password.encode("utf-8"))
    return user_ok and password_ok


async def get_current_user(token: str = Depends(oauth2_scheme)):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        if payload.get("type") != "access":
            raise credentials_exception
        user_id: Optional[str] = payload.get("sub")
        if user_id is None or user_id != settings.admin_user_id:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    return {"id": user_id, "name": payload.get("name", settings.admin_name)}


@router.get("/me")
async def get_current_user_details(current_user: dict = Depends(get_current_user)):
    """
    Get current authenticated user details.
    Requires a valid access token.
    """
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "success": True,
            "data": current_user,
        }
    )


@router.post("/login")
async def login(credentials: AdminLogin):
    if not verify_admin(credentials.user_id, credentials.password):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "error": "Invalid user id or password"}
        )

    access_token = create_access_token({"sub": settings.admin_user_id, "name": settings.admin_name})
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "success": True,
            "data": {
                "user": {"id": settings.admin_user_id, "name": settings.admin_name},
                "access_token": access_token,
                "token_type": "bearer",
            }
        }
    )
