class BookingError(Exception):
    """Base class for priority engine failures."""


class MissingMetricsError(BookingError):
    """A raw metric could not be supplied for an enrolled student."""

    def __init__(self, course_id: int, student_id: int, metric: str):
        self.course_id = course_id
        self.student_id = student_id
        self.metric = metric
        super().__init__(
            f"missing {metric} for student {student_id} in course {course_id}"
        )


class ConfigurationError(BookingError):
    """A weight or threshold setting holds a non-numeric value."""

    def __init__(self, name: str, value):
        self.name = name
        self.value = value
        super().__init__(f"setting {name!r} is not numeric: {value!r}")
