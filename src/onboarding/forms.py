"""
Onboarding Forms - per-step input models and option lists.

Options are fixed lists shared with the frontend through GET /options.
Nothing here gates step advancement; minimums are advisory.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Step 1: Profile
# =============================================================================

INDIAN_STATES = [
    "Andhra Pradesh", "Arunachal Pradesh", "Assam", "Bihar", "Chhattisgarh",
    "Goa", "Gujarat", "Haryana", "Himachal Pradesh", "Jharkhand", "Karnataka",
    "Kerala", "Madhya Pradesh", "Maharashtra", "Manipur", "Meghalaya", "Mizoram",
    "Nagaland", "Odisha", "Punjab", "Rajasthan", "Sikkim", "Tamil Nadu",
    "Telangana", "Tripura", "Uttar Pradesh", "Uttarakhand", "West Bengal",
]

LANGUAGES = [
    "English", "Hindi", "Tamil", "Telugu", "Kannada", "Malayalam", "Marathi",
    "Bengali", "Gujarati", "Punjabi", "Odia", "Urdu",
]

ProfileField = Literal["bio", "state", "city", "location", "languages"]


class ProfileFieldUpdate(BaseModel):
    """
    Step 1 autosave: one field per request, sent as the user types.

    `languages` takes a list; every other field takes a string.
    """
    field: ProfileField
    value: str | list[str]

    @model_validator(mode="after")
    def check_value(self) -> "ProfileFieldUpdate":
        if self.field == "languages":
            if not isinstance(self.value, list):
                raise ValueError("languages must be a list")
            unknown = [lang for lang in self.value if lang not in LANGUAGES]
            if unknown:
                raise ValueError(f"Unknown languages: {', '.join(unknown)}")
            # Keep order, drop repeats
            self.value = list(dict.fromkeys(self.value))
        else:
            if not isinstance(self.value, str):
                raise ValueError(f"{self.field} must be a string")
            if self.field == "state" and self.value and self.value not in INDIAN_STATES:
                raise ValueError(f"Unknown state: {self.value}")
        return self


# =============================================================================
# Step 2: Specialization
# =============================================================================

SPECIALIZATIONS = [
    {"id": "brand_strategy", "label": "Brand Strategy", "description": "Develop brand identity and positioning"},
    {"id": "content_creation", "label": "Content Creation", "description": "Create engaging content for social media"},
    {"id": "reel_direction", "label": "Reel Direction", "description": "Direct and produce short-form videos"},
    {"id": "story_telling", "label": "Story Telling", "description": "Craft compelling narratives"},
    {"id": "creative_direction", "label": "Creative Direction", "description": "Lead overall creative vision"},
    {"id": "photography", "label": "Photography", "description": "Professional photo shoots"},
    {"id": "video_editing", "label": "Video Editing", "description": "Edit and produce videos"},
    {"id": "social_media_management", "label": "Social Media Management", "description": "Manage social media accounts"},
    {"id": "influencer_marketing", "label": "Influencer Marketing", "description": "Connect brands with influencers"},
    {"id": "copywriting", "label": "Copywriting", "description": "Write persuasive copy and captions"},
]
VALID_SPECIALIZATIONS = {s["id"] for s in SPECIALIZATIONS}

SkillLevel = Literal["beginner", "intermediate", "expert"]
SKILL_LEVELS = ["beginner", "intermediate", "expert"]
DEFAULT_SKILL_LEVEL: SkillLevel = "beginner"


class SkillLevelUpdate(BaseModel):
    skill_level: SkillLevel


def specialization_label(category: str) -> str:
    """brand_strategy -> Brand Strategy"""
    for spec in SPECIALIZATIONS:
        if spec["id"] == category:
            return spec["label"]
    return category.replace("_", " ").title()


# =============================================================================
# Step 3: Portfolio
# =============================================================================

PORTFOLIO_MIN_ITEMS = 6  # Advisory
PORTFOLIO_MAX_ITEMS = 10  # Enforced


def portfolio_hint(count: int) -> str | None:
    """Advisory text shown under the portfolio grid."""
    if count < PORTFOLIO_MIN_ITEMS:
        return f"Upload at least {PORTFOLIO_MIN_ITEMS - count} more item(s) to meet the minimum requirement"
    return None


# =============================================================================
# Step 4: Pricing
# =============================================================================


class PricingPackageForm(BaseModel):
    """
    Step 4: one pricing package.

    Saved on explicit action only. `id` is set once the package exists.
    """
    id: str | None = None
    package_name: str = ""
    hours_range: str = ""  # e.g. "2-3 hours"
    price: float = Field(default=0, ge=0)
    description: str = ""
    includes: list[str] = Field(default_factory=list)

    @field_validator("package_name", "hours_range", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("includes")
    @classmethod
    def clean_includes(cls, v: list[str]) -> list[str]:
        return [item.strip() for item in v if item and item.strip()]

    def missing_fields(self) -> list[str]:
        """Fields that must be filled before the package can be saved."""
        missing = []
        if not self.package_name:
            missing.append("package_name")
        if not self.hours_range:
            missing.append("hours_range")
        if self.price <= 0:
            missing.append("price")
        return missing

    def to_row(self) -> dict:
        return {
            "package_name": self.package_name,
            "hours_range": self.hours_range,
            "price": self.price,
            "description": self.description,
            "includes": self.includes,
        }


# =============================================================================
# Step 5: Availability
# =============================================================================

DAYS = [
    {"id": 0, "name": "Sunday", "short": "Sun"},
    {"id": 1, "name": "Monday", "short": "Mon"},
    {"id": 2, "name": "Tuesday", "short": "Tue"},
    {"id": 3, "name": "Wednesday", "short": "Wed"},
    {"id": 4, "name": "Thursday", "short": "Thu"},
    {"id": 5, "name": "Friday", "short": "Fri"},
    {"id": 6, "name": "Saturday", "short": "Sat"},
]

TIME_OPTIONS = [f"{hour:02d}:00" for hour in range(6, 23)]

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "18:00"


def default_day(day_of_week: int) -> dict:
    """Default record for a weekday: 9 to 6, weekends off."""
    return {
        "day_of_week": day_of_week,
        "start_time": DEFAULT_START_TIME,
        "end_time": DEFAULT_END_TIME,
        "is_available": day_of_week not in (0, 6),
    }


def normalize_time(value: str) -> str:
    """Postgres TIME comes back as HH:MM:SS; the form speaks HH:MM."""
    return value[:5] if value else value


class DayAvailabilityUpdate(BaseModel):
    """Step 5: full record for one weekday."""
    start_time: str = DEFAULT_START_TIME
    end_time: str = DEFAULT_END_TIME
    is_available: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, v: str) -> str:
        v = normalize_time(v)
        if v not in TIME_OPTIONS:
            raise ValueError(f"Time must be one of {TIME_OPTIONS[0]}..{TIME_OPTIONS[-1]} on the hour")
        return v

    @model_validator(mode="after")
    def check_range(self) -> "DayAvailabilityUpdate":
        if self.is_available and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


def format_hour(value: str) -> str:
    """'13:00' -> '1 PM'"""
    hour = int(value.split(":")[0])
    if hour == 0:
        return "12 AM"
    if hour == 12:
        return "12 PM"
    if hour > 12:
        return f"{hour - 12} PM"
    return f"{hour} AM"


# =============================================================================
# Step 6: Banking
# =============================================================================


class BankingForm(BaseModel):
    """Step 6: payout details. All optional; the creator can add them later."""
    account_holder_name: str = ""
    bank_name: str = ""
    account_number: str = ""
    ifsc_code: str = ""
    upi_id: str = ""

    @field_validator("account_holder_name", "bank_name", "account_number", "upi_id")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("ifsc_code")
    @classmethod
    def upper_ifsc(cls, v: str) -> str:
        return v.strip().upper()


def mask_account_number(value: str | None) -> str | None:
    """Show only the last four digits."""
    if not value:
        return value
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


# =============================================================================
# Options endpoint payload
# =============================================================================


def get_form_options() -> dict:
    """All option lists the wizard renders, in one payload."""
    return {
        "states": INDIAN_STATES,
        "languages": LANGUAGES,
        "specializations": SPECIALIZATIONS,
        "skill_levels": SKILL_LEVELS,
        "portfolio": {
            "min_items": PORTFOLIO_MIN_ITEMS,
            "max_items": PORTFOLIO_MAX_ITEMS,
            "accept": ["image/*", "video/*"],
        },
        "days": DAYS,
        "time_options": [{"value": t, "label": format_hour(t)} for t in TIME_OPTIONS],
    }
