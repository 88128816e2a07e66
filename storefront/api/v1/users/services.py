"""
User service layer
Handles registration, login and profile management
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, update
from sqlalchemy.exc import IntegrityError
import logging
import uuid

from storefront.core.config import Settings
from storefront.core.exceptions import (
    NotFoundException, ValidationException, UnauthorizedException,
    ForbiddenException, DuplicateResourceException
)
from storefront.core.security import SecurityUtils, ensure_owner_or_admin
from storefront.models import User, UserRole, Cart, Review, Order
from storefront.api.v1.reviews.aggregation import recompute_product_rating
from .schemas import UserRegister, UserLogin, UserUpdate, AuthResponse

logger = logging.getLogger(__name__)

class UserService:
    """User service for business logic"""
    
    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings
    
    def _auth_response(self, user: User) -> AuthResponse:
        token = SecurityUtils.create_access_token(
            {"sub": str(user.id), "role": user.role.value},
            self.settings
        )
        return AuthResponse(id=user.id, name=user.name, email=user.email, role=user.role, token=token)
    
    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()
    
    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundException("User not found")
        return user
    
    async def register(self, data: UserRegister) -> AuthResponse:
        """
        Register a customer together with their empty cart
        
        Raises:
            ValidationException: If the password is too short
            DuplicateResourceException: If the email is taken
        """
        if len(data.password) < self.settings.PASSWORD_MIN_LENGTH:
            raise ValidationException(
                f"Password must be at least {self.settings.PASSWORD_MIN_LENGTH} characters long"
            )
        
        if await self.get_by_email(data.email):
            raise DuplicateResourceException("User", "email", data.email)
        
        user = User(
            name=data.name,
            email=data.email,
            password_hash=SecurityUtils.hash_password(data.password),
            phone=data.phone,
            address=data.address.model_dump() if data.address else None,
            role=UserRole.CUSTOMER,
        )
        user.cart = Cart()
        self.db.add(user)
        
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceException("User", "email", data.email)
        
        logger.info(f"User registered: {user.id} ({user.email})")
        return self._auth_response(user)
    
    async def login(self, data: UserLogin) -> AuthResponse:
        user = await self.get_by_email(data.email)
        if not user or not SecurityUtils.verify_password(data.password, user.password_hash):
            raise UnauthorizedException("Invalid credentials")
        if not user.is_active:
            raise UnauthorizedException("User inactive")
        return self._auth_response(user)
    
    async def list_users(self) -> List[User]:
        result = await self.db.execute(
            select(User)
            .where(User.is_active.is_(True))
            .order_by(User.created_at.desc())
        )
        return list(result.scalars().all())
    
    async def search_users(self, term: Optional[str]) -> List[User]:
        """Case-insensitive match on name or email"""
        if not term or not term.strip():
            raise ValidationException("Provide a search term")
        escaped = term.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        result = await self.db.execute(
            select(User)
            .where(
                User.is_active.is_(True),
                or_(User.name.ilike(pattern, escape="\\"), User.email.ilike(pattern, escape="\\"))
            )
            .order_by(User.name)
        )
        return list(result.scalars().all())
    
    async def get_visible_user(self, user_id: uuid.UUID, current_user: User) -> User:
        user = await self.get_user(user_id)
        ensure_owner_or_admin(current_user, user.id, "view this user")
        return user
    
    async def update_user(self, user_id: uuid.UUID, data: UserUpdate, current_user: User) -> User:
        """
        Update a profile
        
        Only admins may change the role or the active flag
        """
        updates = {
            key: value for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in ("phone", "address")
        }

        if ("role" in updates or "is_active" in updates) and not current_user.is_admin:
            raise ForbiddenException("Not authorized to change the role")
        ensure_owner_or_admin(current_user, user_id, "update this user")
        
        user = await self.get_user(user_id)
        if "address" in updates:
            updates["address"] = data.address.model_dump() if data.address else None
        for key, value in updates.items():
            setattr(user, key, value)
        
        await self.db.commit()
        await self.db.refresh(user)
        return user
    
    async def delete_user(self, user_id: uuid.UUID) -> None:
        """
        Delete a user and their cart
        
        Reviews are removed and the affected ratings recomputed.
        Orders are kept and detached from the user.
        """
        user = await self.get_user(user_id)
        
        result = await self.db.execute(select(Review).where(Review.user_id == user.id))
        reviews = list(result.scalars().all())
        reviewed_products = {review.product_id for review in reviews}
        for review in reviews:
            await self.db.delete(review)
        
        await self.db.execute(
            update(Order).where(Order.user_id == user.id).values(user_id=None)
        )
        
        result = await self.db.execute(select(Cart).where(Cart.user_id == user.id))
        cart = result.scalar_one_or_none()
        if cart is not None:
            await self.db.delete(cart)
        
        await self.db.delete(user)
        await self.db.flush()
        
        for product_id in reviewed_products:
            await recompute_product_rating(self.db, product_id)
        
        await self.db.commit()
        logger.info(f"User {user_id} deleted with cart and {len(reviews)} reviews")
