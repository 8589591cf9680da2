"""Top-level package for nstimes.

nstimes looks up Dutch railway stations, journeys and ticket prices
from the NS travel information API. The same services back the
``nstimes`` command-line tool and the ``nstimes-server`` HTTP API.
"""

__version__ = "0.3.0"
