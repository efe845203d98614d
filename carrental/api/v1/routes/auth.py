from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from carrental.db.session import get_db
from carrental.schemas.auth import LoginRequest, TokenOut
from carrental.models.operator import Operator
from carrental.core.security import verify_password, create_access_token
from carrental.api.deps import get_current_operator

router = APIRouter(tags=["auth"])

@router.post("/auth/login", response_model=TokenOut)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    op = db.query(Operator).filter(Operator.email == body.email.strip().lower()).first()
    if not op or not op.is_active:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(body.password, op.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return TokenOut(access_token=create_access_token(op.id, op.role))


@router.get("/auth/me")
def me(me: Operator = Depends(get_current_operator)):
    return {"id": me.id, "email": me.email, "fullName": me.full_name or "", "role": me.role}
