# marketplace/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field


class PaymentStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


def _bcrypt_safe(value: str) -> str:
    #bcrypt odrzuca hasla dluzsze niz 72 bajty
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Hasło jest za długie")
    return value


Password = Annotated[str, Field(min_length=6, max_length=72), AfterValidator(_bcrypt_safe)]


# =====================================================
# KONTA
# =====================================================
class SignupForm(BaseModel):
    """Rejestracja kupujacego."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: Password
    phone: str | None = Field(None, max_length=30)
    address: str | None = Field(None, max_length=500)


class SellerSignupForm(SignupForm):
    store_name: str = Field(..., min_length=1, max_length=150)


class LoginForm(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class AccountForm(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=30)
    address: str | None = Field(None, max_length=500)


class SellerProfileForm(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    store_name: str = Field(..., min_length=1, max_length=150)
    phone: str | None = Field(None, max_length=30)
    address: str | None = Field(None, max_length=500)


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    phone: str | None = None
    address: str | None = None

    model_config = ConfigDict(from_attributes=True)


class SellerRead(UserRead):
    store_name: str


# =====================================================
# RESET HASLA
# =====================================================
class ForgotPasswordForm(BaseModel):
    email: EmailStr


class VerifyOtpForm(BaseModel):
    email: EmailStr
    otp: str = Field(..., pattern=r"^\d{6}$", description="6-cyfrowy kod z maila")


class ResetPasswordForm(BaseModel):
    email: EmailStr
    reset_token: str = Field(..., min_length=1)
    new_password: Password
    confirm_password: str = Field(..., min_length=1, max_length=72)


# =====================================================
# PRODUKTY
# =====================================================
class ProductForm(BaseModel):
    """Formularz wystawienia produktu przez sprzedawce."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    brand: str | None = Field(None, max_length=100)
    color: str | None = Field(None, max_length=50)
    size: str | None = Field(None, max_length=50)
    currency: str | None = Field(None, max_length=10)
    availability: bool = True
    image_url: str | None = Field(None, max_length=500)


class ProductEditForm(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    category: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)
    color: str | None = Field(None, max_length=50)
    size: str | None = Field(None, max_length=50)
    availability: bool = True
    #brak nowego obrazka = zostaje stary
    image_url: str | None = Field(None, max_length=500)


class ProductOut(BaseModel):
    id: int
    seller_id: int
    name: str
    price: Decimal
    stock: int
    category: str
    description: str | None = None
    brand: str | None = None
    color: str | None = None
    size: str | None = None
    currency: str | None = None
    availability: bool
    image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class SalesRow(BaseModel):
    """Wiersz dashboardu sprzedawcy."""

    id: int
    name: str
    image_url: str | None = None
    total_quantity_sold: int
    total_revenue: Decimal


# =====================================================
# KOSZYK
# =====================================================
class CartItemIn(BaseModel):
    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")


class CartUpdateIn(CartItemIn):
    action: Literal["increase", "decrease"]


class CartLineOut(BaseModel):
    product_id: int
    name: str
    price: Decimal
    image_url: str | None = None
    quantity: int
    subtotal: Decimal


class CartOut(BaseModel):
    items: List[CartLineOut]
    total: Decimal


class CartAddOut(BaseModel):
    success: bool
    message: str


class CartUpdateOut(BaseModel):
    success: bool = True
    removed: bool = False
    newQuantity: int | None = None
    newSubtotal: Decimal | None = None
    total: Decimal


class CartDeleteOut(BaseModel):
    success: bool = True
    total: Decimal


# =====================================================
# ZAMOWIENIA
# =====================================================
class BuyForm(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0, le=1000)
    payment_method: str = Field("COD", min_length=1, max_length=50)


class StartPaymentForm(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0, le=1000)


class ProcessPaymentForm(StartPaymentForm):
    payment_status: PaymentStatus


class CartPaymentForm(BaseModel):
    payment_status: PaymentStatus


class OrderOut(BaseModel):
    id: int
    user_id: int
    product_id: int | None = None
    quantity: int
    total_price: Decimal
    payment_method: str
    status: str
    created_at: datetime
    product_name: str | None = None
    image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)
