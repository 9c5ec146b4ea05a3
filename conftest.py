# type: ignore
"""Point the volunteer mirror at a throwaway directory before the app is imported."""
import os
import tempfile

os.environ.setdefault(
    "VOLUNTEER_DATA_FILE",
    os.path.join(tempfile.mkdtemp(prefix="volunteer-tests-"), "volunteers.json"),
)
