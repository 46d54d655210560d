# Core type aliases for Tern's data model.
# Runtime values are plain Python objects:
#   Number -> float, String -> str, Bool -> bool, List -> list,
#   Null -> tern.types.null.Null, Function/NativeFunction -> tern.types.function.
# No wrapper classes exist for scalars or lists; aliasing a list aliases the
# Python list object itself.

from typing import Any, Callable

# Runtime value alias
TernValue = Any

# Output sink: receives one rendered line per `print` statement
OutputFn = Callable[[str], None]
