from typing import TypeAlias

from jax import Array
from jax.typing import ArrayLike

ScalarArray: TypeAlias = (
    Array  # jax.Array with just a single float element, i.e. shape ()
)
IntArray: TypeAlias = Array  # jax.Array of integer state indices
