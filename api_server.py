"""
FastAPI server for break schedule validation.
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict, Any, Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
import logging
import re
import yaml
import os
from pathlib import Path
from dotenv import load_dotenv
load_dotenv()

from break_scheduler import (
    BreakScheduleService,
    BreakScheduleStore,
    BreakScheduleUpdateRequest,
    BreakScheduleValidator,
    ValidationConfig,
)
from break_scheduler.config import DEFAULT_CONFIG_PATH, validate_rule_parameters
from break_scheduler.time_utils import TimeParseError, normalize_time

logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO'),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)
logger = logging.getLogger('api_server')

_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


# ===== PYDANTIC MODELS =====

class IntervalModel(BaseModel):
    """One 15-minute slot."""
    interval_start: str = Field(..., description="Slot start time (HH:MM or HH:MM:SS)")
    break_type: str = Field(..., description="IN, HB1, B or HB2")


class BreakScheduleRequestModel(BaseModel):
    """Candidate break schedule for one agent on one date."""
    user_id: str = Field(..., description="Agent identifier")
    schedule_date: str = Field(..., description="Date (YYYY-MM-DD)")
    shift_type: Optional[str] = Field(None, description="Shift type (AM, PM, BET, OFF); defaults to the committed one")
    intervals: List[IntervalModel] = Field(default_factory=list, description="Slots to set")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "user_id": "U001",
            "schedule_date": "2026-10-19",
            "shift_type": "AM",
            "intervals": [
                {"interval_start": "10:00", "break_type": "HB1"},
                {"interval_start": "12:00", "break_type": "B"},
                {"interval_start": "12:15", "break_type": "B"},
                {"interval_start": "14:00", "break_type": "HB2"}
            ]
        }
    })

    def to_request(self) -> BreakScheduleUpdateRequest:
        return BreakScheduleUpdateRequest.from_dict(self.model_dump(exclude={'shift_type'}))


class ShiftHoursModel(BaseModel):
    """Working window of a shift type."""
    inicio: str = Field(..., description="Shift start (HH:MM)")
    fin: str = Field(..., description="Shift end (HH:MM)")

    @field_validator('inicio', 'fin')
    def valid_time(cls, v):
        try:
            return normalize_time(v)
        except TimeParseError as e:
            raise ValueError(str(e))

    @model_validator(mode='after')
    def end_after_start(self):
        if self.fin <= self.inicio:
            raise ValueError('fin debe ser posterior a inicio')
        return self


class RuleModel(BaseModel):
    """One validation rule."""
    id: Optional[str] = Field(None, description="Rule identifier (defaults to rule_name)")
    rule_name: str = Field(..., min_length=1, description="Rule name (e.g. minimum_gap)")
    rule_type: str = Field(..., min_length=1, description="ordering, timing, coverage or distribution")
    description: Optional[str] = Field(None, description="Human readable description")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Rule parameters")
    is_active: bool = Field(True, description="Is the rule evaluated?")
    is_blocking: bool = Field(True, description="Do violations block saving?")
    priority: int = Field(..., ge=0, description="Lower = evaluated first")

    @model_validator(mode='after')
    def parameters_valid(self):
        error = validate_rule_parameters(self.parameters, self.rule_type)
        if error:
            raise ValueError(error)
        return self


class ReglasYAML(BaseModel):
    """Shift hours and validation rules configuration."""
    turnos: Dict[str, Optional[ShiftHoursModel]]
    reglas: List[RuleModel]

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "turnos": {
                "AM": {"inicio": "09:00", "fin": "17:00"},
                "PM": {"inicio": "13:00", "fin": "21:00"},
                "BET": {"inicio": "11:00", "fin": "19:00"},
                "OFF": None
            },
            "reglas": [
                {
                    "rule_name": "break_ordering",
                    "rule_type": "ordering",
                    "parameters": {"sequence": ["HB1", "B", "HB2"]},
                    "is_active": True,
                    "is_blocking": True,
                    "priority": 1
                },
                {
                    "rule_name": "minimum_gap",
                    "rule_type": "timing",
                    "parameters": {"min_minutes": 90},
                    "is_active": True,
                    "is_blocking": True,
                    "priority": 2
                }
            ]
        }
    })


app = FastAPI(
    title="Break Scheduler API",
    description="API for validating call center break schedules against configurable rules",
    version="1.0.0"
)

# CORS Middleware (allow all origins for simplicity)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


# ===== HELPER FUNCTIONS =====

def get_config_path() -> Path:
    """Rules file, overridable with BREAK_RULES_CONFIG."""
    return Path(os.getenv('BREAK_RULES_CONFIG', DEFAULT_CONFIG_PATH))


def load_config() -> ValidationConfig:
    """
    Load the current validation configuration.

    Raises:
        HTTPException: 404 if the file is missing, 500 if it is invalid
    """
    config_path = get_config_path()
    try:
        return ValidationConfig.from_yaml(str(config_path))
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"Configuration file not found: {config_path}")
    except ValueError as e:
        raise HTTPException(status_code=500, detail=f"Invalid configuration: {str(e)}")


def build_service(config: ValidationConfig) -> BreakScheduleService:
    """Service wired to the configured rules and schedule file (BREAK_SCHEDULES_PATH overrides)."""
    schedules_path = os.getenv('BREAK_SCHEDULES_PATH') or config.storage.schedules_path
    return BreakScheduleService(BreakScheduleValidator(config), BreakScheduleStore(schedules_path))


# ============================================================================
# SECTION 1: HEALTH & MONITORING
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# ============================================================================
# SECTION 2: BREAK SCHEDULE VALIDATION
# ============================================================================

@app.post("/validate-breaks")
async def validate_breaks(body: BreakScheduleRequestModel) -> Dict[str, Any]:
    """
    Validate a break schedule without saving it.

    Rules are evaluated in priority order against the agent's shift hours
    and the other agents' committed breaks for the same date.

    **Example Response:**
    ```json
    {
      "violations": [
        {
          "rule_name": "break_ordering",
          "message": "HB1 must come before B",
          "severity": "error",
          "affected_intervals": ["14:00", "12:00"]
        }
      ],
      "has_blocking_violations": true
    }
    ```

    Raises:
        404: Configuration file not found
        500: Invalid configuration or stored schedules
    """
    config = load_config()
    try:
        result = build_service(config).validate_break_schedule(body.to_request(), body.shift_type)
        return result.to_dict()
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Validation failed")
        raise HTTPException(status_code=500, detail=f"Validation failed: {str(e)}")


@app.post("/update-break-schedule")
async def update_break_schedule(body: BreakScheduleRequestModel) -> Dict[str, Any]:
    """
    Validate and save a break schedule.

    The schedule is saved only if no blocking ('error') violation is found.
    Warnings are returned but never block the save.

    **Example Response (saved with warning):**
    ```json
    {
      "success": true,
      "violations": [
        {
          "rule_name": "minimum_break_spacing",
          "message": "HB1 break is only 2 intervals away from another agent (minimum 10 required)",
          "severity": "warning",
          "affected_intervals": ["10:00"]
        }
      ]
    }
    ```

    Raises:
        404: Configuration file not found
        500: Failed to read or write schedules
    """
    config = load_config()
    try:
        response = build_service(config).update_break_schedule(body.to_request(), body.shift_type)
        return response.to_dict()
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Schedule update failed")
        raise HTTPException(status_code=500, detail=f"Schedule update failed: {str(e)}")


@app.get("/break-schedules/{schedule_date}")
async def get_break_schedules(schedule_date: str) -> List[Dict[str, Any]]:
    """
    Get all committed break schedules of a date.

    Raises:
        400: Invalid date (must be YYYY-MM-DD)
        500: Failed to read schedules
    """
    if not _DATE_PATTERN.match(schedule_date):
        raise HTTPException(status_code=400, detail="schedule_date must be in YYYY-MM-DD format")

    config = load_config()
    try:
        return build_service(config).store.list_schedules(schedule_date)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to retrieve schedules: {str(e)}")


# ============================================================================
# SECTION 3: CONFIGURATION MANAGEMENT
# ============================================================================

@app.get("/get-rules", response_model=ReglasYAML)
async def get_rules() -> ReglasYAML:
    """
    Get current shift hours and validation rules from config/reglas.yaml.

    The 'almacenamiento' section is not exposed.
    """
    config = load_config()
    data = config.to_dict()
    return ReglasYAML(turnos=data['turnos'], reglas=data['reglas'])


@app.post("/update-rules")
async def update_rules(config: ReglasYAML) -> Dict[str, Any]:
    """
    Update shift hours and validation rules in config/reglas.yaml.

    The new configuration is validated (parameter ranges, min_minutes <=
    max_minutes, known break types) before the file is overwritten. The
    'almacenamiento' section is preserved.

    Raises:
        422: Invalid configuration data
        500: Failed to write file
    """
    try:
        config_path = get_config_path()

        # Read existing YAML to preserve almacenamiento
        existing_data = {}
        if config_path.exists():
            with open(config_path, 'r', encoding='utf-8') as f:
                existing_data = yaml.safe_load(f) or {}

        new_data = {
            'turnos': {
                code: (hours.model_dump() if hours else None)
                for code, hours in config.turnos.items()
            },
            'reglas': [rule.model_dump() for rule in config.reglas],
            'almacenamiento': existing_data.get('almacenamiento', {'schedules_path': 'output/break_schedules.json'})
        }

        # Reject anything the loader would reject
        ValidationConfig.from_dict(new_data)

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(new_data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)

        logger.info("Updated rules configuration at %s (%d rules)", config_path, len(config.reglas))
        return {
            "status": "success",
            "message": "Configuration updated successfully",
            "file": str(config_path),
            "config": config.model_dump()
        }

    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid configuration: {str(e)}")
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update configuration: {str(e)}"
        )


@app.get("/shift-hours")
async def get_shift_hours() -> Dict[str, Optional[Dict[str, str]]]:
    """Shift type -> {start, end} (null for shifts without hours, e.g. OFF)."""
    config = load_config()
    return {
        code: (hours.to_dict() if hours else None)
        for code, hours in config.shift_hours.items()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv('PORT', '8000')))
