from .api import RestPipeFastAPI
from .responses import RestPipeResponse

__all__ = ("RestPipeFastAPI", "RestPipeResponse")
