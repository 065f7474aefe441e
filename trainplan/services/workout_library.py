"""
Workout Template Catalogue

Loads workout templates from workout_library.yaml and turns them into
week-specific prescriptions.

Generated plans address templates with tokens of the form
<library>_<CATEGORY>_<index> (e.g. "tempo_TEMPO_INTERVALS_1"). Tokens are
validated into a WorkoutToken at the parse boundary; a token that does not
resolve raises UnknownWorkoutToken instead of yielding nothing.

Usage:
    catalogue = WorkoutCatalogue.load()
    token = catalogue.parse_token("tempo_TRADITIONAL_TEMPO_0")
    details = catalogue.prescribe(token, paces=week_paces, distance=6,
                                  week_number=4, total_weeks=16)
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, Field, ValidationError

from trainplan.core.exceptions import UnknownWorkoutToken
from trainplan.plan_framework.config import ConfigService
from trainplan.plan_framework.constants import WorkoutType
from .pace_blend import PaceSet
from .structure_converter import convert_vague_structure

logger = logging.getLogger(__name__)


class LibraryType(str, Enum):
    TEMPO = "tempo"
    INTERVAL = "interval"
    LONG_RUN = "longrun"
    HILL = "hill"

    @property
    def workout_type(self) -> WorkoutType:
        return LIBRARY_WORKOUT_TYPES[self]


LIBRARY_WORKOUT_TYPES = {
    LibraryType.TEMPO: WorkoutType.TEMPO,
    LibraryType.INTERVAL: WorkoutType.INTERVAL,
    LibraryType.LONG_RUN: WorkoutType.LONG_RUN,
    LibraryType.HILL: WorkoutType.HILL,
}

TOKEN_PATTERN = re.compile(r"^(tempo|interval|longrun|hill)_(.+)_(\d+)$", re.IGNORECASE)


# =============================================================================
# SCHEMA
# =============================================================================

class WorkoutTemplate(BaseModel):
    """Single workout template definition."""
    name: str = Field(..., min_length=1)
    structure: str = Field(..., min_length=1)
    intensity: str
    description: str = ""
    duration: Optional[str] = None
    benefits: Optional[str] = None


class WorkoutLibrary(BaseModel):
    """One library (tempo, interval, ...) of the catalogue."""
    intensity_guidelines: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    safety_notes: List[str] = Field(default_factory=list)
    categories: Dict[str, List[WorkoutTemplate]] = Field(..., min_length=1)


@dataclass(frozen=True)
class WorkoutToken:
    """
    Validated reference to one catalogue template.

    A token from WorkoutCatalogue.parse_token carries a member of that
    library's category enum; WorkoutToken.parse alone leaves the raw name.
    """
    library: LibraryType
    category: str
    index: int

    @property
    def category_name(self) -> str:
        return self.category.value if isinstance(self.category, Enum) else self.category

    @classmethod
    def parse(cls, raw: str) -> "WorkoutToken":
        """Syntactic parse. Category and index are checked by the catalogue."""
        match = TOKEN_PATTERN.match((raw or "").strip())
        if not match:
            raise UnknownWorkoutToken(raw, "expected <library>_<CATEGORY>_<index>")
        return cls(
            library=LibraryType(match.group(1).lower()),
            category=match.group(2).upper(),
            index=int(match.group(3)),
        )

    def __str__(self) -> str:
        return f"{self.library.value}_{self.category_name}_{self.index}"


# =============================================================================
# PACE INJECTION
# =============================================================================

Replacement = Tuple[re.Pattern, Callable[[PaceSet], str]]


def _easy(paces: PaceSet) -> str:
    return f"{paces.easy_range}/mile"


_STRUCTURE_REPLACEMENTS: Dict[LibraryType, List[Replacement]] = {
    LibraryType.TEMPO: [
        (re.compile(r"@ tempo\b"), lambda p: f"@ {p.threshold.pace}/mile"),
        (re.compile(r"\bmin tempo\b"), lambda p: f"min @ {p.threshold.pace}/mile"),
        (re.compile(r"\btempo pace\b"), lambda p: f"{p.threshold.pace}/mile"),
        (re.compile(r"@ (?:marathon pace|half pace|MP)\b"), lambda p: f"@ {p.marathon.pace}/mile"),
        (re.compile(r"@ 10K pace\b"), lambda p: f"@ {p.threshold.pace}/mile"),
    ],
    LibraryType.INTERVAL: [
        (re.compile(r"@ 5K pace\b"), lambda p: f"@ {p.interval.pace}/mile"),
        (re.compile(r"@ 10K pace\b"), lambda p: f"@ {p.threshold.pace}/mile"),
    ],
    LibraryType.HILL: [
        (re.compile(r"@ tempo effort\b"), lambda p: f"@ tempo effort (~{p.threshold.pace}/mile)"),
        (re.compile(r"@ threshold effort\b"), lambda p: f"@ threshold effort (~{p.threshold.pace}/mile)"),
    ],
    LibraryType.LONG_RUN: [
        (re.compile(r"@ marathon pace\b"), lambda p: f"@ {p.marathon.pace}/mile"),
        (re.compile(r"@ half (?:marathon )?pace\b"), lambda p: f"@ {p.threshold.pace}/mile"),
    ],
}

_EASY_SEGMENT = re.compile(r"\b(\d+(?:-\d+)? min) easy\b(?! \()")


class WorkoutCatalogue:
    """All workout libraries, indexed for token lookup."""

    def __init__(self, libraries: Dict[LibraryType, WorkoutLibrary]):
        self.libraries = libraries
        # One str enum of category names per library, built from the loaded templates
        self.categories: Dict[LibraryType, Type[Enum]] = {
            library_type: Enum(
                f"{library_type.name.title().replace('_', '')}Category",
                [(name, name) for name in library.categories],
                type=str,
            )
            for library_type, library in libraries.items()
        }

    @classmethod
    def load(cls, raw: Optional[Dict[str, Any]] = None) -> "WorkoutCatalogue":
        """
        Build the catalogue from workout_library.yaml (or a raw mapping).

        Raises:
            ValueError: if the catalogue data is missing or malformed
        """
        if raw is None:
            raw = ConfigService.get("workout_library")
        if not raw:
            raise ValueError("Workout catalogue not found (workout_library.yaml)")

        libraries: Dict[LibraryType, WorkoutLibrary] = {}
        for key, data in raw.items():
            library_type = LibraryType(key)
            try:
                library = WorkoutLibrary.model_validate(data)
            except ValidationError as e:
                raise ValueError(f"Invalid workout library '{key}': {e}") from e
            library.categories = {name.upper(): items for name, items in library.categories.items()}
            libraries[library_type] = library

        count = sum(len(t) for lib in libraries.values() for t in lib.categories.values())
        logger.debug(f"Loaded workout catalogue: {count} templates")
        return cls(libraries)

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    def resolve(self, token: WorkoutToken) -> WorkoutTemplate:
        library = self.libraries.get(token.library)
        if library is None:
            raise UnknownWorkoutToken(str(token), f"no '{token.library.value}' library")
        templates = library.categories.get(token.category_name)
        if templates is None:
            raise UnknownWorkoutToken(str(token), f"no category '{token.category_name}'")
        if not 0 <= token.index < len(templates):
            raise UnknownWorkoutToken(
                str(token), f"index {token.index} out of range (0-{len(templates) - 1})"
            )
        return templates[token.index]

    def parse_token(self, raw: str) -> WorkoutToken:
        """Parse and validate a token against this catalogue."""
        token = WorkoutToken.parse(raw)
        self.resolve(token)
        category = self.categories[token.library](token.category_name)
        return WorkoutToken(token.library, category, token.index)

    def tokens(self, library: Optional[LibraryType] = None) -> List[WorkoutToken]:
        result = []
        for library_type, lib in self.libraries.items():
            if library is not None and library_type != library:
                continue
            categories = self.categories[library_type]
            for name, templates in lib.categories.items():
                result.extend(WorkoutToken(library_type, categories(name), i) for i in range(len(templates)))
        return result

    def describe_for_prompt(self) -> str:
        """Token listing for the plan text generator's prompt."""
        lines = []
        for token in self.tokens():
            template = self.resolve(token)
            lines.append(f"[WORKOUT_ID: {token}] {template.name}: {template.description}")
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Prescription
    # -------------------------------------------------------------------------

    def prescribe(
        self,
        token: WorkoutToken,
        paces: Optional[PaceSet] = None,
        distance: Optional[float] = None,
        week_number: Optional[int] = None,
        total_weeks: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Prescription for one template.

        Ranges in the structure are narrowed for the week; when paces are
        given they are injected into the name and structure.
        """
        template = self.resolve(token)
        library = self.libraries[token.library]

        structure = convert_vague_structure(template.structure, week_number, total_weeks)
        name = template.name

        if paces is not None:
            structure = self._inject_structure_paces(token.library, structure, paces)
            name = self._inject_name_paces(token.library, name, paces, distance)
        elif token.library == LibraryType.LONG_RUN and distance:
            name = f"{_miles(distance)}-Mile {name}"

        prescription = {
            "template_id": str(token),
            "library": token.library.value,
            "category": token.category_name,
            "name": name,
            "description": template.description,
            "structure": structure,
            "intensity": template.intensity,
            "intensity_guidance": library.intensity_guidelines.get(template.intensity, {}),
            "safety_notes": self._safety_notes(token.library, template, library, distance),
            "distance": distance,
        }
        if template.benefits:
            prescription["benefits"] = template.benefits
        if paces is not None:
            prescription["paces"] = paces.model_dump()
        return prescription

    @staticmethod
    def _inject_structure_paces(library: LibraryType, structure: str, paces: PaceSet) -> str:
        for pattern, build in _STRUCTURE_REPLACEMENTS[library]:
            structure = pattern.sub(build(paces), structure)
        structure = re.sub(r"\beasy (warmup|cooldown)\b", lambda m: f"easy ({_easy(paces)}) {m.group(1)}", structure)
        structure = _EASY_SEGMENT.sub(lambda m: f"{m.group(1)} easy ({_easy(paces)})", structure)
        return structure

    @staticmethod
    def _inject_name_paces(library: LibraryType, name: str, paces: PaceSet, distance: Optional[float]) -> str:
        if library == LibraryType.TEMPO:
            return f"{name} ({paces.threshold.pace}/mi)"
        if library == LibraryType.INTERVAL:
            return f"{name} ({paces.interval.pace}/mi)"
        if library == LibraryType.LONG_RUN:
            if distance:
                return f"{_miles(distance)}-Mile {name} ({paces.easy_range}/mi)"
            return f"{name} ({paces.easy_range}/mi)"
        return name

    @staticmethod
    def _safety_notes(
        library_type: LibraryType,
        template: WorkoutTemplate,
        library: WorkoutLibrary,
        distance: Optional[float],
    ) -> List[str]:
        notes = list(library.safety_notes)
        if library_type == LibraryType.TEMPO and template.duration and (
            "40" in template.duration or "50" in template.duration
        ):
            notes.append("Fuel appropriately for longer tempo sessions")
            notes.append("Stay hydrated throughout the workout")
        if "Minutes" in template.name or "On/Off" in template.name:
            notes.append("Let easy segments naturally speed up as the workout progresses")
        if library_type == LibraryType.LONG_RUN and distance and distance >= 16:
            notes.append("Rehearse race-day fueling and gear on this run")
        return notes


def _miles(distance: float) -> str:
    return f"{distance:g}"


@lru_cache(maxsize=1)
def get_catalogue() -> WorkoutCatalogue:
    """Catalogue built from the loaded rule tables, cached per process."""
    return WorkoutCatalogue.load()
