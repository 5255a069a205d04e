from pathlib import Path
from typing import Union

PathType = Union[str, Path]
