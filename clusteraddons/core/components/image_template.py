from dataclasses import dataclass
from string import Template

from clusteraddons.core.config import IMAGE_FORMAT, IMAGE_VERSION


@dataclass(frozen=True)
class ImageTemplate:
    """Image reference pattern, e.g. ``openshift/origin-${component}:${version}``."""

    format: str = IMAGE_FORMAT
    version: str = IMAGE_VERSION
    latest: bool = False

    def expand(self, component: str) -> str:
        version = 'latest' if self.latest else self.version

        try:
            return Template(self.format).substitute(component=component, version=version)
        except KeyError as e:
            raise ValueError(f"Unknown placeholder {e} in image format '{self.format}'") from e
        except ValueError as e:
            raise ValueError(f"Invalid image format '{self.format}': {e}") from e
