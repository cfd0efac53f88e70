"""
Hypothesis Strategies for Property-Based Testing

Custom strategies for generating object metadata and storage names.
"""

import string
from datetime import datetime, timezone

from hypothesis import strategies as st

from fileshare.domain.file_sharing import ObjectMetadata


# =============================================================================
# Primitive Strategies
# =============================================================================

def identifiers():
    """Generate delimiter-free identifiers."""
    return st.text(alphabet=string.ascii_letters + string.digits, min_size=1, max_size=16)


def original_names():
    """Generate original filenames, delimiters and non-ASCII included."""
    return st.text(
        alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="/"),
        min_size=1,
        max_size=80,
    )


@st.composite
def hour_aligned_instants(draw) -> datetime:
    """Generate aware UTC instants on an hour boundary."""
    instant = draw(st.datetimes(
        min_value=datetime(2000, 1, 1),
        max_value=datetime(2099, 12, 31, 23),
    ))
    return instant.replace(minute=0, second=0, microsecond=0, tzinfo=timezone.utc)


# =============================================================================
# Domain Strategies
# =============================================================================

@st.composite
def object_metadata(draw) -> ObjectMetadata:
    return ObjectMetadata(
        identifier=draw(identifiers()),
        expires_at=draw(hour_aligned_instants()),
        single_download=draw(st.booleans()),
        original_name=draw(original_names()),
    )


def storage_names():
    """Arbitrary directory entry names, mostly junk, sometimes close to valid."""
    near_valid = st.builds(
        lambda parts: "-".join(parts),
        st.lists(
            st.one_of(
                st.sampled_from(["true", "false", "2024011512", "abc", ""]),
                st.text(max_size=10),
            ),
            min_size=1,
            max_size=6,
        ),
    )
    return st.one_of(st.text(max_size=60), near_valid)
