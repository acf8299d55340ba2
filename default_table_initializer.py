from table_registry import TableRegistry


class DefaultTableInitializer:
    def create(self, registry: TableRegistry, count: int) -> list[int]:
        return [registry.create_table().id for _ in range(count)]
