# Giro studio models
from app.models.userModel import User, UserPushToken, Account
from app.models.classModel import (
    Instructor, Location, ClassSchedule, StudioClass, StaticBike, Bike,
    Reservation, ReservationBike, ReservationCredit
)
from app.models.packageModel import Package, Purchase
from app.models.billingModel import Invoice
from app.models.menuModel import MenuItem, MenuPurchase
from app.models.contentModel import Banner, Notification
from app.models.sessionModel import Session

__all__ = [
    "User", "UserPushToken", "Account",
    "Instructor", "Location", "ClassSchedule", "StudioClass", "StaticBike", "Bike",
    "Reservation", "ReservationBike", "ReservationCredit",
    "Package", "Purchase",
    "Invoice",
    "MenuItem", "MenuPurchase",
    "Banner", "Notification",
    "Session",
]
