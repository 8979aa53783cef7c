import importlib
from typing import Any, Dict, List, Optional, Type

from finance_dashboard.config.settings import ConfigLoader
from finance_dashboard.parsers.base import StatementParser


class ParserFactory:
    """
    Factory for creating statement parsers.

    Uses a registry pattern to map file format identifiers to parser classes.
    Registrations normally come from the parsers.json config.
    """

    _registry: Dict[str, Type[StatementParser]] = {}
    _extensions: Dict[str, str] = {}

    @classmethod
    def register(cls, fmt: str, parser_class: Type[StatementParser]) -> None:
        """
        Register a parser for a file format.

        Args:
            fmt: Format identifier (e.g. 'csv', 'json')
            parser_class: The parser class

        Raises:
            ValueError: If another parser is already registered for the format
            TypeError: If parser_class doesn't inherit from StatementParser

        Example:
            ParserFactory.register('csv', CsvStatementParser)
        """
        if not isinstance(parser_class, type) or not issubclass(parser_class, StatementParser):
            raise TypeError(f"{parser_class} must inherit from StatementParser")

        existing = cls._registry.get(fmt)
        if existing is not None and existing is not parser_class:
            raise ValueError(f"Parser for '{fmt}' is already registered")

        cls._registry[fmt] = parser_class

    @classmethod
    def create_parser(cls, fmt: str) -> StatementParser:
        """
        Create a parser instance for a format name or a file extension.

        Extensions listed in parsers.json (e.g. ".txt") resolve to their format.

        Raises:
            ValueError: If no parser registered for this format

        Example:
            parser = ParserFactory.create_parser('csv')
            response = parser.parse('statement.csv')
        """
        if not cls._registry:
            cls.load_parsers_from_config()

        key = fmt.lower().lstrip(".")
        key = cls._extensions.get(key, key)
        if key not in cls._registry:
            available = ', '.join(cls._registry.keys())
            raise ValueError(
                f"No parser registered for '{fmt}'. "
                f"Available parsers: {available}"
            )

        return cls._registry[key]()

    @classmethod
    def get_available_formats(cls) -> List[str]:
        """Return list of all registered format identifiers"""
        return list(cls._registry.keys())

    @classmethod
    def load_parsers_from_config(
        cls,
        config: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Load and register parsers from configuration.

        Args:
            config: Optional config dict. If None, loads parsers.json through
                the ConfigLoader. Useful for testing with custom configs.

        Example (testing):
            test_config = {"parsers": [{"format": "csv", "class": "..."}]}
            ParserFactory.load_parsers_from_config(config=test_config)
        """
        if config is None:
            config = ConfigLoader.load_parsers_config()

        for parser_config in config['parsers']:
            module_path, class_name = str(parser_config['class']).rsplit('.', 1)
            module = importlib.import_module(module_path)
            parser_class = getattr(module, class_name)

            cls.register(parser_config["format"], parser_class)
            for extension in parser_config.get("extensions", []):
                cls._extensions[extension.lower().lstrip(".")] = parser_config["format"]
