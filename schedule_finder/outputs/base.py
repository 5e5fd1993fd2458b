from abc import ABC, abstractmethod

class BaseOutput(ABC):
    @abstractmethod
    def write(self, schedules):
        """Write the inferred schedules to the chosen sink and return its path."""
        pass
