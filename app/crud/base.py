from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.core.database import Base
from app.core.exceptions import NotFoundError

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType], label: Optional[str] = None):
        self.model = model
        self.label = label or model.__name__

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        """
        Obtener un registro por ID.

        Args:
            db: Sesión de base de datos
            id: ID del registro

        Returns:
            Objeto del modelo o None si no existe
        """
        return db.query(self.model).filter(self.model.id == id).first()

    def get_or_raise(self, db: Session, id: Any) -> ModelType:
        """
        Igual que `get`, pero lanza `NotFoundError` si el registro no existe.
        """
        db_obj = self.get(db, id=id)
        if db_obj is None:
            raise NotFoundError(f"{self.label} {id} no encontrado")
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """
        Actualizar un registro existente.

        Solo se escriben los campos presentes en `obj_in` que existan como
        columnas del modelo.

        Args:
            db: Sesión de base de datos
            db_obj: Objeto existente en la BD
            obj_in: Datos de actualización (schema o dict)

        Returns:
            Objeto actualizado
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)
        columns = {column.key for column in self.model.__table__.columns}
        for field, value in update_data.items():
            if field in columns:
                setattr(db_obj, field, value)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj
