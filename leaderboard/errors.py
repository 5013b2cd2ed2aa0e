"""
Exceptions raised by the snapshot query services.

"No data" is never an exception here: resolvers return None and listings
return empty results. Storage errors (SQLAlchemyError) propagate untouched.
"""


class LeaderboardError(Exception):
    """Base class for query input errors the serving layer reports as 400."""


class InvalidIdentifierError(LeaderboardError):
    """A table or column name failed the identifier allow-list."""

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f'Invalid identifier: {identifier!r}')


class MalformedTimestampError(LeaderboardError):
    """A target time string matches none of the accepted precisions."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f'Malformed timestamp {value!r}: expected YYYY-MM-DD, '
            f'YYYY-MM-DD HH, YYYY-MM-DD HH:MM or YYYY-MM-DD HH:MM:SS'
        )
