# routers/auth.py
"""
Auth API routes.

Login is passwordless in this backend: a registered email is exchanged for
a signed bearer token carrying the user's id and role.
"""
from fastapi import APIRouter, Depends, status

from dependencies import create_access_token, get_user_service, verify_token
from schemas.user import Identity, RegisterRequest, TokenRequest
from services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Register a user")
def register(
     body: RegisterRequest,
     users: UserService = Depends(get_user_service),
):
     """
     Create a tenant, landlord, bank or ministry account.

     - **name**: Display name
     - **email**: Unique login email
     - **role**: One of tenant, landlord, bank, ministry
     """
     user = users.register(body)
     return {
          "success": True,
          "message": "Registration successful",
          "user": user,
          "token": create_access_token(user),
     }


@router.post("/token", summary="Issue a bearer token")
def issue_token(
     body: TokenRequest,
     users: UserService = Depends(get_user_service),
):
     user = users.get_by_email(body.email)
     return {"success": True, "token": create_access_token(user), "user": user}


@router.get("/me", summary="Current user")
def me(
     identity: Identity = Depends(verify_token),
     users: UserService = Depends(get_user_service),
):
     return {"success": True, "user": users.get_user(identity.user_id)}
