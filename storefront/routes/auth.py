# storefront/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import User
from storefront.schemas import user as schemas
from storefront.utils.audit import write_log, client_ip
from storefront.utils.hashing import get_password_hash, verify_password
from storefront.utils.tokenJWT import create_access_token, get_current_user

router = APIRouter(tags=["Auth"])


# Register a new customer account
@router.post("/register", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    normalized_email = payload.email.strip().lower()

    # Check for existing user
    existing = db.query(User).filter(func.lower(User.email) == normalized_email).first()
    if existing:
        write_log(
            db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
            ip=client_ip(request), meta={"email": normalized_email, "reason": "Email exists"},
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    new_user = User(
        email=normalized_email,
        password_hash=get_password_hash(payload.password),
        name=payload.name.strip(),
        role="customer",
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    write_log(
        db, user_id=new_user.id, action="REGISTER", resource="auth", status="SUCCESS",
        ip=client_ip(request), meta={"email": new_user.email},
    )
    return new_user


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    db_user = db.query(User).filter(func.lower(User.email) == email).first()

    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if db_user.banned:
        write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": email, "reason": "banned"})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is banned")

    access_token = create_access_token(data={"sub": db_user.email, "role": db_user.role})

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})

    return {"access_token": access_token, "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
