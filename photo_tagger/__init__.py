"""photo-tagger: group construction-site photos by machine and activity."""

__version__ = "0.3.0"
