"""Developer tooling (opt-in timing via ``MOTIONLOG_DEBUG``)."""
