import os

from hypothesis import settings

# HYPOTHESIS_PROFILE=ci runs more examples per property
settings.register_profile("ci", max_examples=500, deadline=None)
settings.register_profile("dev", max_examples=100)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))
