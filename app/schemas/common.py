from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """
    Modelo base de la API.

    Los atributos Python son snake_case y el JSON usa camelCase
    (`txnId`, `totalAmount`, ...), igual que la API original de la tienda.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
