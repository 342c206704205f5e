class NewsdeskError(Exception):
    pass


class SourceFetchError(NewsdeskError):
    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class ClassificationError(NewsdeskError):
    pass


class LLMServiceError(ClassificationError):
    pass


class NotificationError(NewsdeskError):
    pass
