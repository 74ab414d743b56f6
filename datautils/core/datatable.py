"""
MODULE: datautils.core.datatable
RESPONSIBILITY: In-memory tabular result model (columns + ordered rows).
ALLOWED: Dataclasses, Typing.
FORBIDDEN: Database access, logging.
ERRORS: KeyError (unknown column), IndexError (bad ordinal).

Табличная модель результата запроса.

DataTable хранит описание колонок и строки, Row даёт доступ к значениям
как по имени колонки, так и по порядковому номеру.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence


@dataclass(frozen=True)
class Column:
    """
    Описание колонки результата

    Attributes:
        name: Имя колонки
        col_type: Python-тип значений колонки
        length: Длина (для строковых типов, 0 если не задана)
        db_type: Тип колонки в терминах базы данных
    """
    name: str
    col_type: type = object
    length: int = 0
    db_type: str = ""


class Row:
    """Строка таблицы: упорядоченные значения, привязанные к колонкам"""

    __slots__ = ("_values", "_index", "_read_only")

    def __init__(self, values: Sequence[Any], index: Dict[str, int], read_only: bool = False):
        self._values = list(values)
        self._index = index
        self._read_only = read_only

    @property
    def values(self) -> List[Any]:
        """Значения строки в порядке колонок (для строки только для чтения - копия)"""
        if self._read_only:
            return list(self._values)
        return self._values

    @property
    def read_only(self) -> bool:
        return self._read_only

    def frozen(self) -> "Row":
        """Копия строки, которую нельзя изменить"""
        if self._read_only:
            return self
        return Row(self._values, self._index, read_only=True)

    def _ordinal(self, name: str) -> int:
        try:
            return self._index[name.lower()]
        except KeyError:
            raise KeyError(f"Колонка не найдена: '{name}'") from None

    def value(self, name: str) -> Any:
        return self._values[self._ordinal(name)]

    def value_by_ord(self, ordinal: int) -> Any:
        if ordinal < 0 or ordinal >= len(self._values):
            raise IndexError(f"Неверный номер колонки: {ordinal}")
        return self._values[ordinal]

    def value_string(self, name: str) -> str:
        return _to_string(self.value(name))

    def value_string_ord(self, ordinal: int) -> str:
        return _to_string(self.value_by_ord(ordinal))

    def value_int64(self, name: str) -> int:
        return _to_int(self.value(name))

    def value_int64_ord(self, ordinal: int) -> int:
        return _to_int(self.value_by_ord(ordinal))

    def set_value_by_ord(self, value: Any, ordinal: int) -> None:
        """Установка значения по порядковому номеру колонки"""
        if self._read_only:
            raise TypeError("Строка доступна только для чтения")
        if ordinal < 0 or ordinal >= len(self._values):
            raise IndexError(f"Неверный номер колонки: {ordinal}")
        self._values[ordinal] = value

    def to_dict(self) -> Dict[str, Any]:
        return {name: self._values[i] for name, i in self._index.items()}

    def __getitem__(self, key):
        if isinstance(key, int):
            return self.value_by_ord(key)
        return self.value(key)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other) -> bool:
        if isinstance(other, Row):
            return self._values == other._values
        return NotImplemented

    def __repr__(self) -> str:
        return f"Row({self._values!r})"


def _to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _to_int(value: Any) -> int:
    if value is None:
        return 0
    return int(value)


class DataTable:
    """
    Таблица результата запроса

    Колонки добавляются до строк. Имена колонок сравниваются без учёта
    регистра, как это делает PostgreSQL для не заключённых в кавычки имён.
    """

    def __init__(self, columns: Optional[Iterable[Column]] = None):
        self.columns: List[Column] = []
        self.rows: List[Row] = []
        self._index: Dict[str, int] = {}
        for column in columns or []:
            self._append_column(column)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def _append_column(self, column: Column) -> None:
        # при повторяющихся именах поиск по имени находит первую колонку
        self._index.setdefault(column.name.lower(), len(self.columns))
        self.columns.append(column)

    def add_column(self, name: str, col_type: type = object, length: int = 0, db_type: str = "") -> Column:
        """
        Добавление колонки

        Args:
            name: Имя колонки
            col_type: Python-тип значений
            length: Длина колонки
            db_type: Тип колонки в базе данных

        Returns:
            Добавленная колонка
        """
        if self.rows:
            raise ValueError("Нельзя добавлять колонки в таблицу, содержащую строки")
        if name.lower() in self._index:
            raise ValueError(f"Колонка уже существует: '{name}'")
        column = Column(name=name, col_type=col_type, length=length, db_type=db_type)
        self._append_column(column)
        return column

    def new_row(self) -> Row:
        """Пустая строка по текущему набору колонок (в таблицу не добавляется)"""
        return Row([None] * len(self.columns), self._index)

    def add_row(self, row: Row) -> None:
        if len(row) != len(self.columns):
            raise ValueError(
                f"Количество значений ({len(row)}) не совпадает с количеством колонок ({len(self.columns)})"
            )
        self.rows.append(row)

    def add_values(self, values: Sequence[Any]) -> Row:
        """Добавление строки из последовательности значений"""
        row = Row(values, self._index)
        self.add_row(row)
        return row

    @classmethod
    def from_cursor_result(cls, description, records: Iterable[Sequence[Any]]) -> "DataTable":
        """
        Построение таблицы из описания курсора DB-API и набора записей

        Args:
            description: cursor.description (последовательность с именем колонки в позиции 0)
            records: Записи, возвращённые курсором

        Returns:
            Заполненная таблица
        """
        table = cls()
        for item in description or []:
            name = getattr(item, "name", None) or item[0]
            type_code = getattr(item, "type_code", None)
            table._append_column(Column(name=name, db_type=str(type_code) if type_code is not None else ""))
        for record in records:
            table.add_values(tuple(record))
        return table

    def __iter__(self):
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)
