# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the system)
# =============================================================================
#
# Everything that flows through this server is a MongoDB document or a
# list of them.  We do NOT try to describe document shapes with classes:
# filters, updates, pipeline stages and query results are opaque trees
# that we hand to the driver (or to the output budget) untouched.
#
# The aliases below exist so that function signatures say WHAT a value is
# ("a filter document", "a pipeline") instead of "dict[str, Any]".
# =============================================================================

from typing import Any, Union

# -----------------------------------------------------------------------------
# TreeValue - the recursive value type the output budget works on
# -----------------------------------------------------------------------------
# A decoded document is made of:
#   - scalars (None, bool, int, float, str, plus BSON scalars like ObjectId)
#   - lists of TreeValue
#   - dicts mapping str -> TreeValue (insertion order is kept for display)
#
# Decoded documents can't contain cycles, so recursion always terminates.
# -----------------------------------------------------------------------------
TreeValue = Union[None, bool, int, float, str, list["TreeValue"], dict[str, "TreeValue"], Any]

# A single MongoDB document, filter, update spec or pipeline stage.
Document = dict[str, Any]

# An aggregation pipeline: an ordered list of stage documents.
Pipeline = list[Document]

# The default BoundingBudget, in bytes of compact JSON.
DEFAULT_MAX_OUTPUT_BYTES = 25000
