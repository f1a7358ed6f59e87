"""Load directive schemas from YAML files."""

import logging
from pathlib import Path

import yaml

from edict.directive.base import Directive
from edict.directive.schema import DirectiveSchema
from edict.exceptions import SchemaError

logger = logging.getLogger(__name__)


class SchemaLoader:
    """Loads ``directive: Name`` documents from <schema_path>/*.yaml.

    Hooks, loaders and transaction handlers referenced by name must be
    registered in HookRegistry before ``load_all`` runs.
    """

    def __init__(self, schema_path: Path):
        self.schema_path = Path(schema_path)
        self.schemas: dict[str, DirectiveSchema] = {}
        self.sources: dict[str, Path] = {}
        self.failures: dict[Path, str] = {}

    def load_all(self, strict: bool = True) -> None:
        """Load every directive file.

        Args:
            strict: Raise on the first invalid file. When False, invalid
                files are recorded in ``failures`` and skipped.

        Raises:
            SchemaError: For an invalid or duplicate directive (strict only)
        """
        if not self.schema_path.exists():
            logger.warning("Directive path %s does not exist", self.schema_path)
            return

        for yaml_file in sorted(self.schema_path.glob("*.yaml")):
            try:
                self._load_file(yaml_file)
            except (SchemaError, yaml.YAMLError) as e:
                if strict:
                    raise
                logger.warning("Skipping %s: %s", yaml_file.name, e)
                self.failures[yaml_file] = str(e)

    def _load_file(self, yaml_file: Path) -> None:
        with open(yaml_file) as f:
            data = yaml.safe_load(f)
        if not data or "directive" not in data:
            logger.debug("No directive in %s", yaml_file.name)
            return

        name = data["directive"]
        if name in self.schemas:
            raise SchemaError(
                f"Directive '{name}' is defined in both "
                f"{self.sources[name].name} and {yaml_file.name}"
            )
        self.schemas[name] = DirectiveSchema.from_dict(data)
        self.sources[name] = yaml_file
        logger.debug("Loaded directive %s from %s", name, yaml_file.name)

    def get_schema(self, name: str) -> DirectiveSchema | None:
        """Get a loaded schema by directive name."""
        return self.schemas.get(name)

    def list_directives(self) -> list[str]:
        """List all directive names."""
        return list(self.schemas.keys())

    def directive_class(self, name: str) -> type[Directive]:
        """Build a Directive subclass bound to a loaded schema.

        Raises:
            KeyError: If no directive with that name was loaded
        """
        schema = self.schemas[name]
        return type(name, (Directive,), {"schema": schema, "__module__": __name__})
