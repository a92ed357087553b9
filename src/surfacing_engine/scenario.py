"""
Scenario Replay
===============

Load recorded or simulated mission scenarios and replay them through the
engine, as the console's scenario timeline does.

Scenario File (YAML or JSON):
    name: warehouse-fire
    areas_of_interest:          # GeoJSON FeatureCollection or list of areas
      type: FeatureCollection
      features: [...]
    critical_assets:
      - {id: port-1, name: Drone port, coord: [11.500, 48.710]}
    events:
      - {label: fire, score: 0.91, coord: [11.5003, 48.7101], ts: 1000}
      - ...

Events are kept as raw payloads so that malformed entries are replayed
(and ignored by the engine) instead of aborting the load.
"""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from surfacing_engine.engine import SignificanceEngine
from surfacing_engine.models.decision import Decision, DecisionResult
from surfacing_engine.models.geometry import AreaOfInterest, CriticalAsset, SurfacingContext


logger = logging.getLogger(__name__)


class Scenario(BaseModel):
    """
    A replayable sequence of detection events with its context.

    Attributes:
        name: Scenario name
        areas_of_interest: Areas of interest
        critical_assets: Critical assets
        events: Raw event payloads in feed order
    """

    name: str = Field(default="scenario")
    areas_of_interest: List[AreaOfInterest] = Field(default_factory=list)
    critical_assets: List[CriticalAsset] = Field(default_factory=list)
    events: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("areas_of_interest", mode="before")
    @classmethod
    def accept_feature_collection(cls, value: Any) -> Any:
        """Unpack a GeoJSON FeatureCollection into areas."""
        if isinstance(value, dict) and value.get("type") == "FeatureCollection":
            return SurfacingContext.from_geojson(value).areas_of_interest
        return value

    @property
    def context(self) -> SurfacingContext:
        """Context snapshot for the whole replay."""
        return SurfacingContext(
            areas_of_interest=self.areas_of_interest,
            critical_assets=self.critical_assets,
        )


def load_scenario(path: Union[str, Path]) -> Scenario:
    """
    Load a scenario from a YAML or JSON file.

    Args:
        path: Scenario file path

    Returns:
        Validated Scenario

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the context is malformed
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")

    logger.info(f"Loading scenario from: {path}")
    with open(file_path, "r") as f:
        if file_path.suffix == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f) or {}

    scenario = Scenario.model_validate(data)
    logger.info(
        f"Loaded scenario: name={scenario.name}, events={len(scenario.events)}, "
        f"aois={len(scenario.areas_of_interest)}, assets={len(scenario.critical_assets)}"
    )
    return scenario


def replay(
    scenario: Scenario,
    engine: Optional[SignificanceEngine] = None,
) -> Iterator[DecisionResult]:
    """
    Feed every scenario event through an engine.

    Args:
        scenario: Scenario to replay
        engine: Engine to use (fresh if None)

    Yields:
        One DecisionResult per event, in order
    """
    engine = engine or SignificanceEngine()
    context = scenario.context
    for event in scenario.events:
        yield engine.evaluate(event, context)


def summarize(results: List[DecisionResult]) -> Dict[str, int]:
    """Count decisions by value, including zero counts."""
    counts = Counter(r.decision for r in results)
    return {d.value: counts[d] for d in Decision}
