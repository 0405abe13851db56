from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, meta
from jinja2.exceptions import TemplateNotFound, TemplateSyntaxError

from clusteraddons.core.utils import setup_logger


class MissingTemplateValuesError(ValueError):
    def __init__(self, missing: set[str]):
        self.missing = missing
        super().__init__(
            f"There are variables in the template that are not provided in the 'values' dictionary: {sorted(missing)}"
        )


class BaseAssetSource(ABC):
    @abstractmethod
    def get_asset(self, asset_name: str, asset_module: str | None = None) -> bytes:
        pass


class TemplateLoader(BaseAssetSource):
    _TEMPLATE_SUBFOLDERS = ('web-console',)

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._logger = setup_logger('TemplateLoader')

        if templates_dir is None:
            templates_dir = Path(__file__).parent.resolve() / 'templates'

        if not templates_dir.is_dir() or not templates_dir.exists():
            raise FileNotFoundError(
                f'Templates directory not found at: {templates_dir}. '
                "Please ensure a 'templates' folder exists next to your script."
            )

        self._templates_dir = templates_dir
        # rendered output is YAML, not HTML
        self._environment = Environment(
            loader=FileSystemLoader(templates_dir), autoescape=False, undefined=StrictUndefined, keep_trailing_newline=True
        )
        # no builtin globals (namespace, range, dict, ...), so every name must come from the values
        self._environment.globals.clear()

    def _validate_template_module(self, template_module: str | None) -> str:
        if template_module is not None and template_module not in self._TEMPLATE_SUBFOLDERS:
            raise ValueError(
                f"Invalid template module: '{template_module}'. Must be one of {self._TEMPLATE_SUBFOLDERS} or None."
            )

        return '.' if template_module is None else template_module

    def get_asset(self, asset_name: str, asset_module: str | None = None) -> bytes:
        resolved_module = self._validate_template_module(asset_module)

        asset_path = self._templates_dir / resolved_module / asset_name

        if not asset_path.is_file():
            self._logger.error(f"Asset '{resolved_module}/{asset_name}' not found.")
            raise TemplateNotFound(
                f"Template '{resolved_module}/{asset_name}' not found. "
                "Please ensure the template file exists in the correct path relative to the 'templates' directory."
            )

        return asset_path.read_bytes()

    def render(self, template_source: str, values: dict[str, Any] | None = None) -> str:
        values = values or {}

        if not isinstance(values, dict):
            msg = 'Template values must be a dictionary'
            self._logger.error(msg)
            raise TypeError(msg)

        parsed_ast = self._environment.parse(template_source)
        undeclared_variables = meta.find_undeclared_variables(parsed_ast) - values.keys()

        if undeclared_variables:
            raise MissingTemplateValuesError(undeclared_variables)

        return self._environment.from_string(template_source).render(**values)

    def render_template(
        self, template_name: str, template_module: str | None = None, values: dict[str, Any] | None = None
    ) -> str:
        template_source = self.get_asset(template_name, template_module).decode('utf-8')

        try:
            return self.render(template_source, values)
        except TemplateSyntaxError:
            self._logger.error(f"Template '{template_name}' is not valid Jinja2")
            raise


template_loader = TemplateLoader()
