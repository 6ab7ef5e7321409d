from .mock_data_generator import MOCK_REASON, MockDataGenerator, mock_location

__all__ = ["MOCK_REASON", "MockDataGenerator", "mock_location"]
