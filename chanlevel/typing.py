from __future__ import annotations

from typing import Any, TypeAlias

import numpy as np
import numpy.typing as npt

NDArrayInt: TypeAlias = npt.NDArray[np.integer[Any]]

# One payload's codewords, in transmission order
Message: TypeAlias = npt.NDArray[np.uint16]
