from pydantic import BaseModel, ConfigDict, Field, field_validator


class Employee(BaseModel):
    id: int
    name: str = ""
    skill: str | None = None
    store_id: int | None = None
    # Shift code -> preference in [-1, 1]; missing codes are neutral.
    preferences: dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("preferences")
    @classmethod
    def validate_preferences(cls, value: dict[str, float]) -> dict[str, float]:
        for code, preference in value.items():
            if not -1.0 <= preference <= 1.0:
                raise ValueError(f"preference for {code} must be within [-1, 1]")
        return value
