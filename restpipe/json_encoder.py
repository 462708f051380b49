# restpipe to json encoding

import datetime
import decimal
import json
from uuid import UUID
import restpipe
from .config import is_debug
from typing import Any


class ResourceJSONEncoder(json.JSONEncoder):
    """
    JSON encoding for the types that may remain after dehydration
    """

    # pylint: disable=too-many-return-statements,arguments-differ,method-hidden
    def default(self, obj: Any) -> Any:
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if isinstance(obj, (datetime.date, datetime.time)):
            # same format as the dehydrated values
            return obj.isoformat()
        if isinstance(obj, (set, frozenset)):
            return list(obj)
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, decimal.Decimal):
            return float(obj) if obj.is_finite() else None
        if isinstance(obj, bytes):
            if obj == b"":
                return ""
            restpipe.log.debug("ResourceJSONEncoder: serializing bytes obj")
            return obj.hex()
        to_dict = getattr(obj, "to_dict", None)
        if callable(to_dict):
            return to_dict()

        # We shouldn't get here: the resource fields tree should only expose serializable values
        if not is_debug():
            restpipe.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
            return {"error": "ResourceJSONEncoder invalid object"}

        return self.ghetto_encode(obj)

    @staticmethod
    def ghetto_encode(obj: Any) -> Any:
        """
        if everything else failed, try to encode the public obj attributes
        i.e. those attributes without a _ prefix
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        try:
            result = {}
            for k, v in vars(obj).items():
                if not k.startswith("_"):
                    if isinstance(v, (int, float)) or v is None:
                        result[k] = v
                    else:
                        result[k] = str(v)
        except TypeError:
            result = str(obj)
        return result


def dumps(obj: Any) -> str:
    return json.dumps(obj, cls=ResourceJSONEncoder)
