import warnings

# Ignore deprecation noise from third-party packages
warnings.filterwarnings("ignore", category=DeprecationWarning)

from tests.fixtures.signaling_fixtures import *  # noqa: E402, F403
