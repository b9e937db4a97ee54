import json
import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, Optional

from .catalog import activity_keys, definition_of
from .schema import ActivityEntry, ActivityTypeDefinition, DayBased, HourBased

logger = logging.getLogger(__name__)

DEFAULT_RULESET = "standard"

def round_half_up(value: float, places: int = 1) -> float:
    """
    Rounds half away from zero at the given decimal place.
    Built-in round() uses banker's rounding and binary floats, so 0.25 -> 0.2;
    going through the shortest decimal repr gives 0.3 as expected.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))

def calculate_credits(definition: ActivityTypeDefinition,
                      classroom_hours: float = 0.0,
                      autonomous_hours: float = 0.0,
                      days: Optional[float] = None) -> float:
    """
    Converts logged hours or days into credits.

    Day-based types earn `days * credit_per_day` with no rounding.
    Hour-based types earn the fractional minimum of the two hour ratios (both
    requirements must be met proportionally), times `credit_per_unit`, rounded
    to one decimal.
    """
    if isinstance(definition, DayBased):
        return (days or 0.0) * definition.credit_per_day

    if isinstance(definition, HourBased):
        classroom_units = classroom_hours / (definition.classroom_hours_per_unit or 1)
        autonomous_units = autonomous_hours / (definition.autonomous_hours_per_unit or 1)
        completed_units = min(classroom_units, autonomous_units)
        return round_half_up(completed_units * definition.credit_per_unit, 1)

    raise TypeError(f"Unsupported activity definition: {definition!r}")

def credits_for_entry(entry: ActivityEntry) -> float:
    """Credit value of a single entry, rounded on its own."""
    return calculate_credits(
        definition_of(entry.activity_type),
        classroom_hours=entry.classroom_hours,
        autonomous_hours=entry.autonomous_hours,
        days=entry.days,
    )

def progress(value: float, cap: float) -> float:
    """Percentage of `cap` reached, capped at 100 for display."""
    if cap <= 0:
        return 100.0
    return min(value / cap * 100, 100.0)

@dataclass
class CreditStats:
    training_credits: float
    total_credits: float
    research_credits: float

    # Display percentages (capped at 100)
    training_progress: float
    total_progress: float

    # Advisory, not a blocker
    exceeds_training_cap: bool

    training_cap: float
    total_cap: float
    credits_by_type: Dict[str, float] = field(default_factory=dict)

class CreditReporter:
    """
    Totals & threshold logic for the doctoral program.
    Stateless: every figure is derived from the ledger on demand.
    """

    FALLBACK_RULES = {
        "training_cap": 40,
        "total_cap": 180,
        "research_credits": 140,
    }

    def __init__(self, ruleset: str = DEFAULT_RULESET, rules_path: Optional[str] = None):
        self.ruleset = ruleset
        self.rules = self._load_rules(ruleset, rules_path)

    def _load_rules(self, ruleset: str, rules_path: Optional[str]) -> Dict[str, Any]:
        """Loads the threshold ruleset from json, falling back to built-in values."""
        if rules_path is None:
            base_path = os.path.dirname(os.path.abspath(__file__))
            rules_path = os.path.join(base_path, 'data', 'program_requirements.json')

        try:
            with open(rules_path, 'r', encoding='utf-8') as f:
                all_rules = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read program rules from %s (%s); using defaults", rules_path, e)
            return dict(self.FALLBACK_RULES)

        if not isinstance(all_rules, dict):
            logger.warning("Ignoring program rules in %s: expected a JSON object", rules_path)
            return dict(self.FALLBACK_RULES)

        if ruleset not in all_rules:
            logger.warning("Ruleset %r not found, falling back to %r", ruleset, DEFAULT_RULESET)
            rules = all_rules.get(DEFAULT_RULESET, {})
        else:
            rules = all_rules[ruleset]

        if not isinstance(rules, dict):
            logger.warning("Ignoring ruleset %r in %s: expected a JSON object", ruleset, rules_path)
            rules = {}

        merged = dict(self.FALLBACK_RULES)
        merged.update(rules)
        return merged

    @property
    def training_cap(self) -> float:
        return float(self.rules['training_cap'])

    @property
    def total_cap(self) -> float:
        return float(self.rules['total_cap'])

    @property
    def research_credits(self) -> float:
        return float(self.rules['research_credits'])

    def training_credits(self, ledger) -> float:
        return sum(ledger.credits_for(key) for key in activity_keys())

    def total_credits(self, ledger) -> float:
        return self.training_credits(ledger) + self.research_credits

    def exceeds_training_cap(self, ledger) -> bool:
        return self.training_credits(ledger) > self.training_cap

    def calculate_stats(self, ledger) -> CreditStats:
        """
        Computes all dashboard figures for a ledger.
        Expects an object exposing `credits_for(type_key)`.
        """
        # 1. Per-type credits (aggregate path, rounded once per type)
        by_type = {key: ledger.credits_for(key) for key in activity_keys()}

        # 2. Totals
        training = sum(by_type.values())
        total = training + self.research_credits

        return CreditStats(
            training_credits=training,
            total_credits=total,
            research_credits=self.research_credits,
            training_progress=progress(training, self.training_cap),
            total_progress=progress(total, self.total_cap),
            exceeds_training_cap=training > self.training_cap,
            training_cap=self.training_cap,
            total_cap=self.total_cap,
            credits_by_type=by_type,
        )
