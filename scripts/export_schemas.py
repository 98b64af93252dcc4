"""Export JSON schemas for the public requirement models."""

import json
from pathlib import Path

from backend.compliance.models import AppliedTransition, BusinessFacts, Requirement
from backend.compliance.rules.packages import CompliancePackage


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for model in (BusinessFacts, Requirement, AppliedTransition, CompliancePackage):
        path = schemas_dir / f"{model.__name__}.schema.json"
        with open(path, "w") as f:
            json.dump(model.model_json_schema(), f, indent=2)
        print(f"Exported {model.__name__} schema to {path}")


if __name__ == "__main__":
    main()
