"""Data input/output helpers (log files and file names).

Utility modules here keep disk-level concerns isolated from the rest of the
library:
- :mod:`file_paths` derives ``<yyyyMMddHHmmss>_<kind>.txt`` log names.
- :mod:`log_loader` parses written logs for replay and inspection.
"""
