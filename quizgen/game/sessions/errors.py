class QuizSessionError(Exception):
    pass


class SessionNotFoundError(QuizSessionError):
    pass


class SessionFinishedError(QuizSessionError):
    pass


class QuestionAlreadyAnsweredError(QuizSessionError):
    pass


class QuestionNotAnsweredError(QuizSessionError):
    pass


class HintUnavailableError(QuizSessionError):
    pass


class InvalidAnswerOptionError(QuizSessionError):
    pass
