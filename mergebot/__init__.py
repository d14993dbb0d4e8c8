"""mergebot: merge pull requests on a trusted user's ``/mergebot merge`` command."""

__version__ = "0.1.0"
