"""Pydantic model for user-editable clock settings"""
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sleepclock.models.schedule import Schedule

# red-purple
DEFAULT_NIGHT_LIGHT_COLOR = "#953553"

HEX_COLOR_PATTERN = re.compile(r"#[0-9a-fA-F]{6}")


class Settings(BaseModel):
    """Schedule fields plus night light preferences"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bedtime: str = "20:00"
    wake_time: str = Field(default="07:00", alias="wakeTime")
    quiet_time_minutes: int = Field(default=15, ge=0, le=1440, alias="quietTimeDuration")
    ok_to_wake_duration: int = Field(default=30, ge=0, le=1440, alias="okToWakeDuration")
    nap_duration_minutes: int = Field(default=180, ge=0, le=1440, alias="napDuration")
    night_light: bool = Field(default=True, alias="nightLight")
    night_light_color: str = Field(default=DEFAULT_NIGHT_LIGHT_COLOR, alias="nightLightColor")

    @field_validator('night_light_color')
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Ensure #RRGGBB hex color"""
        value = v.strip()
        if not HEX_COLOR_PATTERN.fullmatch(value):
            raise ValueError(f"Invalid color '{v}'. Expected #RRGGBB")
        return value.lower()

    @property
    def schedule(self) -> Schedule:
        return Schedule(
            bedtime=self.bedtime,
            wake_time=self.wake_time,
            quiet_time_minutes=self.quiet_time_minutes,
            ok_to_wake_duration=self.ok_to_wake_duration,
            nap_duration_minutes=self.nap_duration_minutes,
        )
