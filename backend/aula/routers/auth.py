from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from ..settings import settings
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import Profile, AuthSession

router = APIRouter(prefix="/auth", tags=["auth"])

log = logging.getLogger(__name__)
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")



class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class User(BaseModel):
	id: str
	email: str
	name: Optional[str] = None
	lastname: Optional[str] = None
	subject: Optional[str] = None


def _bcrypt_safe(password: str) -> str:
	# bcrypt only looks at the first 72 bytes
	password_bytes = password.encode('utf-8')
	if len(password_bytes) > 72:
		password_bytes = password_bytes[:72]
	return password_bytes.decode('utf-8', errors='ignore')


def hash_password(password: str) -> str:
	return pwd_context.hash(_bcrypt_safe(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(_bcrypt_safe(plain_password), hashed_password)


def _to_user(row: Profile) -> User:
	return User(id=row.id, email=row.email, name=row.name, lastname=row.lastname, subject=row.subject)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
	row = db.query(Profile).filter(Profile.email == email.strip().lower()).first()
	if row and verify_password(password, row.password_hash):
		return _to_user(row)
	return None


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	"""Return a safe JWT expiry timestamp.

	Uses the configured session timeout when no explicit delta is given and caps
	the result at ``datetime.max`` instead of overflowing.
	"""
	delta = expires_delta
	if delta is None:
		minutes = getattr(settings, "access_token_expire_minutes", None)
		if isinstance(minutes, int) and minutes > 0:
			delta = timedelta(minutes=minutes)
		else:
			delta = timedelta(days=30)
	now = datetime.now(timezone.utc)
	try:
		return now + delta
	except OverflowError:
		return datetime.max.replace(tzinfo=timezone.utc)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	expire = _resolve_expiry(expires_delta)
	to_encode.update({"exp": expire})
	encoded_jwt = jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
	return encoded_jwt


@router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
	# The OAuth2 form calls it "username"; teachers log in with their email
	user = authenticate_user(db, form_data.username, form_data.password)
	if not user:
		raise HTTPException(status_code=401, detail="Correo o contraseña incorrectos")
	session_id = uuid.uuid4().hex
	access_token = create_access_token({"sub": user.id, "jti": session_id})
	try:
		db.merge(AuthSession(session_id=session_id, profile_id=user.id))
		db.commit()
	except Exception:
		db.rollback()
		log.exception("Could not persist session for %s", user.email)
		raise HTTPException(status_code=500, detail="No se pudo iniciar la sesión")
	return Token(access_token=access_token)


def _decode(token: str) -> tuple[str, str]:
	credentials_exception = HTTPException(status_code=401, detail="No se pudieron validar las credenciales")
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise credentials_exception
	profile_id: str | None = payload.get("sub")
	jti: str | None = payload.get("jti")
	if profile_id is None or jti is None:
		raise credentials_exception
	return profile_id, jti


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
	credentials_exception = HTTPException(status_code=401, detail="No se pudieron validar las credenciales")
	profile_id, jti = _decode(token)
	# Sessions are revocable server-side: the token is only valid while its row exists
	try:
		session_row = db.get(AuthSession, jti)
		if not session_row or session_row.profile_id != profile_id:
			raise credentials_exception
		profile = db.get(Profile, profile_id)
		if profile is None:
			raise credentials_exception
		session_row.last_activity_at = datetime.utcnow()
		db.add(session_row)
		db.commit()
	except HTTPException:
		raise
	except Exception:
		# On DB errors, fail closed
		log.exception("Session lookup failed")
		raise credentials_exception
	return _to_user(profile)


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
	return user


@router.post("/logout", status_code=204)
async def logout(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)):
	_, jti = _decode(token)
	row = db.get(AuthSession, jti)
	if row is not None:
		db.delete(row)
		db.commit()


class RegisterRequest(BaseModel):
	email: str
	password: str
	name: Optional[str] = None
	lastname: Optional[str] = None
	subject: Optional[str] = None


@router.post("/register", status_code=201, response_model=User)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
	email = (req.email or "").strip().lower()
	password = req.password or ""
	if not email or "@" not in email:
		raise HTTPException(status_code=400, detail="Se requiere un correo válido")
	if len(password) < 6:
		raise HTTPException(status_code=400, detail="La contraseña debe tener al menos 6 caracteres")
	existing = db.query(Profile).filter(Profile.email == email).first()
	if existing:
		raise HTTPException(status_code=409, detail="El correo ya está registrado")
	row = Profile(
		email=email,
		password_hash=hash_password(password),
		name=(req.name or "").strip() or None,
		lastname=(req.lastname or "").strip() or None,
		subject=(req.subject or "").strip() or None,
	)
	db.add(row)
	db.commit()
	db.refresh(row)
	log.info("Registered teacher profile %s", row.id)
	return _to_user(row)
