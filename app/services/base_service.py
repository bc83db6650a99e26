import logging
from dataclasses import replace
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from app.core.exceptions import NotFoundError

ModelType = TypeVar("ModelType")
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)

class BaseService(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType], items: Optional[Iterable[ModelType]] = None):
        """
        Servicio base con operaciones CRUD sobre una lista en memoria.
        Las mutaciones reemplazan el registro completo (último escritor gana).
        No hay persistencia: el contenido vuelve a la semilla al reiniciar.

        **Parámetros**

        * `model`: Clase (dataclass) del registro
        * `items`: Registros semilla
        """
        self.model = model
        self._items: List[ModelType] = list(items or [])
        self._sequence = len(self._items)

    def next_id(self) -> str:
        """Genera un identificador sintético secuencial."""
        self._sequence += 1
        return str(self._sequence)

    def _index_of(self, id: Any) -> int:
        for index, item in enumerate(self._items):
            if getattr(item, "id") == id:
                return index
        return -1

    def get(self, id: Any) -> Optional[ModelType]:
        """Obtiene un registro por ID."""
        index = self._index_of(id)
        return self._items[index] if index != -1 else None

    def get_or_404(self, id: Any) -> ModelType:
        """Obtiene un registro por ID o lanza NotFoundError si no existe."""
        db_obj = self.get(id)
        if db_obj is None:
            logger.warning(f"Registro no encontrado en {self.model.__name__} con ID: {id}")
            raise NotFoundError(f"{self.model.__name__} con ID {id} no encontrado.")
        return db_obj

    def get_multi(self, *, skip: int = 0, limit: int = 100) -> List[ModelType]:
        """Obtiene múltiples registros con paginación."""
        return list(self._items[skip:skip + limit])

    def get_all(self) -> List[ModelType]:
        return list(self._items)

    def get_count(self) -> int:
        return len(self._items)

    def add(self, db_obj: ModelType) -> ModelType:
        """Agrega un registro ya construido al final de la lista."""
        self._items.append(db_obj)
        logger.info(f"Nuevo registro en {self.model.__name__} (ID: {getattr(db_obj, 'id', 'N/A')})")
        return db_obj

    def update(
        self,
        *,
        id: Any,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> Optional[ModelType]:
        """
        Actualiza un registro existente.
        Devuelve None si el ID no existe; el llamador decide si eso es un error.
        """
        index = self._index_of(id)
        if index == -1:
            logger.info(f"Actualización ignorada: {self.model.__name__} con ID {id} no existe.")
            return None

        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            # exclude_unset=True para no sobrescribir campos no enviados con None
            update_data = obj_in.model_dump(exclude_unset=True)

        current = self._items[index]
        valid_data = {}
        for field, value in update_data.items():
            if hasattr(current, field):
                valid_data[field] = value
            else:
                logger.warning(f"Intento de actualizar campo '{field}' inexistente en modelo {self.model.__name__}")

        if not valid_data:
            logger.info(f"No se proporcionaron datos para actualizar en {self.model.__name__} (ID: {id})")
            return current

        self._items[index] = replace(current, **valid_data)
        logger.debug(f"{self.model.__name__} ID {id} actualizado con datos: {list(valid_data)}")
        return self._items[index]

    def remove(self, *, id: Any) -> bool:
        """Elimina un registro por ID. Devuelve False si no existía."""
        index = self._index_of(id)
        if index == -1:
            logger.info(f"Eliminación ignorada: {self.model.__name__} con ID {id} no existe.")
            return False
        del self._items[index]
        logger.warning(f"Registro eliminado de {self.model.__name__} (ID: {id})")
        return True
