"""Review schemas"""

from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
import uuid

from storefront.schemas.common import CategorySummary

def _clean_comment(v):
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Comment is required")
    return v

class ReviewCreate(BaseModel):
    """Accepts the product as ``product_id`` or ``product``"""
    product_id: uuid.UUID = Field(..., validation_alias=AliasChoices("product_id", "product"))
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., max_length=500)
    
    @field_validator("comment")
    @classmethod
    def clean_comment(cls, v):
        return _clean_comment(v)

class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
    
    @field_validator("comment")
    @classmethod
    def clean_comment(cls, v):
        return _clean_comment(v)

class ReviewAuthor(BaseModel):
    id: uuid.UUID
    name: str
    
    class Config:
        from_attributes = True

class ReviewProduct(BaseModel):
    id: uuid.UUID
    name: str
    price: float
    image: Optional[str] = None
    category: Optional[CategorySummary] = None
    
    class Config:
        from_attributes = True

class ReviewResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    user: Optional[ReviewAuthor] = None
    product_id: uuid.UUID
    product: Optional[ReviewProduct] = None
    rating: int
    comment: str
    is_verified: bool
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True

class RatingStats(BaseModel):
    average_rating: float = 0
    total_reviews: int = 0
    five: int = 0
    four: int = 0
    three: int = 0
    two: int = 0
    one: int = 0

class ProductReviews(BaseModel):
    stats: RatingStats
    reviews: List[ReviewResponse]

class TopRatedProduct(BaseModel):
    product_id: uuid.UUID
    name: str
    price: float
    image: Optional[str] = None
    category_name: Optional[str] = None
    average_rating: float
    total_reviews: int
