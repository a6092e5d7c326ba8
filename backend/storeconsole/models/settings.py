from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


APP_SETTINGS_ID = "app_settings"
STORE_SETTINGS_ID = "store_settings"


class AppSettings(db.Model):
    """Global console switches (singleton row `app_settings`)."""
    __tablename__ = "app_settings"

    id = db.Column(db.String(32), primary_key=True, default=APP_SETTINGS_ID)
    show_sign_up = db.Column(db.Boolean, nullable=False, default=True)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)
    updated_by = db.Column(db.String(64), nullable=False, default="")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "show_sign_up": self.show_sign_up,
            "updated_at": to_utc_z(self.updated_at),
            "updated_by": self.updated_by,
        }


class StoreSettings(db.Model):
    """
    Store profile (singleton row `store_settings`).

    Contact, address, hours, social and SEO fields live in the `data` bag;
    the allowed keys and their types are declared in settings_service.
    """
    __tablename__ = "store_settings"

    id = db.Column(db.String(32), primary_key=True, default=STORE_SETTINGS_ID)
    data = db.Column(db.JSON, nullable=False, default=dict)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)
    updated_by = db.Column(db.String(64), nullable=False, default="")

    def to_dict(self) -> dict:
        result = {"id": self.id}
        result.update(self.data or {})
        result.update({
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "updated_by": self.updated_by,
        })
        return result
