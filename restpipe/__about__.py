__version__ = "0.3.0"
__description__ = "restpipe : async CRUD resources with pluggable auth, throttling, validation and caching"
