import logging
import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from careerflow.app.api.routes.route_logic import resume_store
from careerflow.app.api.routes.route_logic.history_store import append_record
from careerflow.app.api.routes.route_logic.text_parsing import render_transcript
from careerflow.app.core.config import Settings
from careerflow.app.core.exceptions import (
    GenerationSchemaError,
    InputValidationError,
    InterviewSequenceError,
    InterviewStateError,
    PersistenceError,
    RecordNotFoundError,
)
from careerflow.app.llm.models import (
    GenerationPolicy,
    InterviewTurnInput,
    InterviewTurnOutput,
    LLMConfig,
)
from careerflow.app.llm.orchestration import advance_interview
from careerflow.app.llm.prompt_assembly import (
    validate_job_description,
    validate_user_response,
)
from careerflow.app.models.interview_session import (
    InterviewChannel,
    InterviewSession,
    InterviewSessionData,
    InterviewStatus,
)
from careerflow.app.models.mock_interview import (
    MockInterviewRecord,
    MockInterviewRecordData,
)

log = logging.getLogger(__name__)

OPENING_UTTERANCE = "Hello, thank you for having me."
OPENING_QUESTION = "Let's get started. Please introduce yourself."
END_UTTERANCE = "I'd like to end the interview now."


@dataclass
class InterviewPolicy:
    """Local limits applied to every interview.

    Attributes:
        max_questions (int): Hard ceiling on questions; reaching past it forces completion.
        transcript_window (int): Most recent transcript messages sent to the model.

    """

    max_questions: int = 10
    transcript_window: int = 12


@dataclass
class TurnResult:
    """Outcome of a state transition.

    Attributes:
        session (InterviewSession): The session after the transition.
        record_id (str | None): The MockInterviewRecord id, once the session is completed and saved.
        persistence_error (str | None): Why saving the record failed, when it did.
            The session itself is committed regardless.

    """

    session: InterviewSession
    record_id: str | None = None
    persistence_error: str | None = None


def interview_policy_from_settings(settings: Settings) -> InterviewPolicy:
    return InterviewPolicy(
        max_questions=settings.interview_max_questions,
        transcript_window=settings.interview_transcript_window,
    )


def get_session(db: Session, user_id: int, session_id: str) -> InterviewSession:
    """Fetch one of a user's interview sessions.

    Raises:
        RecordNotFoundError: If the session does not exist or belongs to another user.

    """
    session = (
        db.query(InterviewSession)
        .filter(InterviewSession.id == session_id, InterviewSession.user_id == user_id)
        .first()
    )
    if session is None:
        raise RecordNotFoundError(f"Interview {session_id} not found.")
    return session


def validate_turn_output(output: InterviewTurnOutput) -> InterviewTurnOutput:
    """Check a model response before it may change any session state.

    Args:
        output (InterviewTurnOutput): The parsed model response.

    Returns:
        InterviewTurnOutput: A copy with `next_question` stripped of surrounding whitespace.

    Raises:
        GenerationSchemaError: If `score` is outside [0, 100] or not finite, or
            `next_question` is empty while the interview continues, or non-empty
            once it is over. Whitespace-only counts as empty.

    """
    if not math.isfinite(output.score) or not 0 <= output.score <= 100:
        _msg = f"Rejecting interview turn: score {output.score} outside [0, 100]"
        log.warning(_msg)
        raise GenerationSchemaError(
            "The AI service returned a score outside 0-100. Please try again."
        )

    next_question = output.next_question.strip()
    if output.is_interview_over and next_question:
        _msg = "Rejecting interview turn: interview over but a next question was returned"
        log.warning(_msg)
        raise GenerationSchemaError(
            "The AI service ended the interview but asked another question. Please try again."
        )
    if not output.is_interview_over and not next_question:
        _msg = "Rejecting interview turn: interview continues without a next question"
        log.warning(_msg)
        raise GenerationSchemaError(
            "The AI service did not return a next question. Please try again."
        )

    return output.model_copy(update={"next_question": next_question})


def _transcript_window(messages: list[dict[str, Any]], window: int) -> str:
    if window <= 0:
        return ""
    return render_transcript(messages[-window:])


def _turn_scores(messages: list[dict[str, Any]]) -> list[float]:
    return [
        float(message["score"])
        for message in messages
        if message.get("role") == "assistant"
        and message.get("score") is not None
        and not message.get("final")
    ]


def _complete(
    session: InterviewSession,
    messages: list[dict[str, Any]],
    score: float,
    feedback: str,
    summary: str,
) -> None:
    """Move a session to COMPLETED with an aggregate score and final feedback."""
    session.messages = [
        *messages,
        {"role": "assistant", "content": feedback, "score": score, "final": True},
    ]
    session.status = InterviewStatus.COMPLETED
    session.is_over = True
    session.current_question = ""
    session.last_score = score
    session.last_feedback = feedback
    session.conversation_summary = summary


def apply_turn(
    session: InterviewSession,
    output: InterviewTurnOutput,
    user_response: str | None,
    policy: InterviewPolicy,
) -> None:
    """Apply a validated model response to the session, in memory.

    Args:
        session (InterviewSession): The session to update.
        output (InterviewTurnOutput): A response that passed `validate_turn_output`.
        user_response (str | None): The candidate's answer, or None for the opening turn.
        policy (InterviewPolicy): The local limits.

    Notes:
        1. The candidate's answer, when there is one, is appended to the transcript.
        2. If the model ended the interview, complete it with the model's score and
           feedback. `question_count` is not incremented.
        3. If continuing would take `question_count` past `policy.max_questions`,
           complete it anyway. The score is the rounded mean of every per-turn score,
           this one included, and the feedback notes that the limit was reached.
        4. Otherwise append the next question with this turn's feedback and score
           and increment `question_count` by exactly one.
        5. The opening turn's greeting is not scored, so its feedback and score are
           not recorded.

    """
    messages = list(session.messages or [])
    if user_response is not None:
        messages.append({"role": "user", "content": user_response})

    if output.is_interview_over:
        _msg = f"Interview {session.id} completed by the model at question_count={session.question_count}"
        log.debug(_msg)
        _complete(session, messages, output.score, output.feedback, output.conversation_history)
        return

    if session.question_count + 1 > policy.max_questions:
        scores = [*_turn_scores(messages), output.score]
        aggregate = float(round(sum(scores) / len(scores)))
        feedback = (
            f"The interview reached the limit of {policy.max_questions} questions. "
            f"{output.feedback}"
        )
        _msg = f"Interview {session.id} forced to completion at the question limit"
        log.debug(_msg)
        _complete(session, messages, aggregate, feedback, output.conversation_history)
        return

    question_message: dict[str, Any] = {"role": "assistant", "content": output.next_question}
    if user_response is not None:
        question_message["feedback"] = output.feedback
        question_message["score"] = output.score
        session.last_score = output.score
        session.last_feedback = output.feedback
    session.messages = [*messages, question_message]
    session.status = InterviewStatus.IN_PROGRESS
    session.current_question = output.next_question
    session.conversation_summary = output.conversation_history
    session.question_count = session.question_count + 1


def _commit_session(db: Session, session: InterviewSession) -> None:
    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        _msg = f"Concurrent update rejected for interview {session.id}"
        log.warning(_msg)
        raise InterviewSequenceError(
            "This interview was updated by another request. Reload it and try again."
        ) from e
    except SQLAlchemyError as e:
        db.rollback()
        _msg = f"Failed to save interview {session.id}: {e!s}"
        log.exception(_msg)
        raise PersistenceError("The interview could not be saved.") from e
    db.refresh(session)


def _save_record_after_completion(db: Session, session: InterviewSession) -> TurnResult:
    if session.status != InterviewStatus.COMPLETED:
        return TurnResult(session=session)
    try:
        record_id = save_interview_record(db, session.user_id, session.id)
    except PersistenceError as e:
        return TurnResult(session=session, persistence_error=str(e))
    return TurnResult(session=session, record_id=record_id)


async def start_interview(
    db: Session,
    user_id: int,
    job_description: str,
    llm_config: LLMConfig,
    policy: InterviewPolicy,
    generation_policy: GenerationPolicy | None = None,
    channel: InterviewChannel = InterviewChannel.TEXT,
    resume_id: str | None = None,
) -> TurnResult:
    """Start a mock interview: NotStarted to InProgress, or straight to Completed.

    Args:
        db (Session): The database session.
        user_id (int): The candidate.
        job_description (str): The target job description, at least 50 characters.
        llm_config (LLMConfig): The resolved LLM configuration.
        policy (InterviewPolicy): The local limits.
        generation_policy (GenerationPolicy | None): Timeout and retry policy.
        channel (InterviewChannel): Text or voice interaction.
        resume_id (str | None): The stored resume to personalize questions with.
            Required when the user has stored resumes.

    Returns:
        TurnResult: The new session. When the model ends the interview on the
            opening turn the session is already completed, with `question_count` 0.

    Raises:
        InputValidationError: If the job description is too short, or a resume
            selection is required and missing.
        RecordNotFoundError: If `resume_id` names no resume of this user.
        GenerationError: If the opening call fails. Nothing is stored.

    Notes:
        1. Validate the input and resolve the resume text.
        2. Call the model with `question_count` 0, the synthetic greeting and the
           opening question.
        3. Validate the response, then create the session and apply the turn.
        4. Commit the session, then save the record if it is already completed.

    """
    _msg = f"start_interview starting for user_id: {user_id}"
    log.debug(_msg)

    job_description = validate_job_description(job_description)

    resume_text = None
    if resume_id:
        resume_text = resume_store.get_resume(db, user_id, resume_id).text_content
    elif resume_store.list_resumes(db, user_id):
        raise InputValidationError(
            "Select one of your stored resumes to start the interview.",
            field="resume_id",
        )

    turn_input = InterviewTurnInput(
        job_description=job_description,
        resume_text=resume_text,
        user_response=OPENING_UTTERANCE,
        interview_question=OPENING_QUESTION,
        question_count=0,
    )
    output = validate_turn_output(
        await advance_interview(turn_input, llm_config, generation_policy)
    )

    session = InterviewSession(
        user_id=user_id,
        data=InterviewSessionData(
            job_description=job_description,
            channel=channel,
            resume_text=resume_text,
        ),
    )
    apply_turn(session, output, user_response=None, policy=policy)
    db.add(session)
    _commit_session(db, session)

    result = _save_record_after_completion(db, session)
    _msg = f"start_interview returning session {session.id} in state {session.status.value}"
    log.debug(_msg)
    return result


async def submit_turn(
    db: Session,
    user_id: int,
    session_id: str,
    user_response: str,
    llm_config: LLMConfig,
    policy: InterviewPolicy,
    generation_policy: GenerationPolicy | None = None,
    expected_question_count: int | None = None,
) -> TurnResult:
    """Submit the candidate's answer to the current question.

    Args:
        db (Session): The database session.
        user_id (int): The candidate.
        session_id (str): The interview session.
        user_response (str): The answer, at least 10 characters.
        llm_config (LLMConfig): The resolved LLM configuration.
        policy (InterviewPolicy): The local limits.
        generation_policy (GenerationPolicy | None): Timeout and retry policy.
        expected_question_count (int | None): The `question_count` the client last
            saw. A mismatch means the client is out of date or resubmitting.

    Returns:
        TurnResult: The session after the turn, with the record id or persistence
            error when the turn completed it.

    Raises:
        RecordNotFoundError: If the session does not exist for this user.
        InterviewStateError: If the session is not in progress. The model is not called.
        InterviewSequenceError: If `expected_question_count` does not match, or
            another submission for this session committed first.
        InputValidationError: If the answer is too short.
        GenerationError: If the call fails or the response fails validation.
            The session is unchanged.

    """
    _msg = f"submit_turn starting for interview {session_id}"
    log.debug(_msg)

    session = get_session(db, user_id, session_id)
    if session.status != InterviewStatus.IN_PROGRESS or session.is_over:
        _msg = f"Rejecting turn for interview {session_id} in state {session.status.value}"
        log.warning(_msg)
        raise InterviewStateError("This interview is not in progress and accepts no further answers.")

    if expected_question_count is not None and expected_question_count != session.question_count:
        _msg = (
            f"Rejecting turn for interview {session_id}: expected question_count "
            f"{expected_question_count}, stored {session.question_count}"
        )
        log.warning(_msg)
        raise InterviewSequenceError(
            "This answer is for an earlier question. Reload the interview and try again."
        )

    user_response = validate_user_response(user_response)

    turn_input = InterviewTurnInput(
        job_description=session.job_description,
        resume_text=session.resume_text,
        user_response=user_response,
        interview_question=session.current_question,
        previous_conversation=session.conversation_summary or None,
        transcript=_transcript_window(session.messages or [], policy.transcript_window),
        question_count=session.question_count,
    )
    output = validate_turn_output(
        await advance_interview(turn_input, llm_config, generation_policy)
    )

    apply_turn(session, output, user_response=user_response, policy=policy)
    _commit_session(db, session)

    result = _save_record_after_completion(db, session)
    _msg = f"submit_turn returning interview {session_id} in state {session.status.value}"
    log.debug(_msg)
    return result


async def end_interview(
    db: Session,
    user_id: int,
    session_id: str,
    llm_config: LLMConfig,
    policy: InterviewPolicy,
    generation_policy: GenerationPolicy | None = None,
    expected_question_count: int | None = None,
) -> TurnResult:
    """Ask to end the interview through the ordinary turn path.

    Completion is left to the model; the session stays in progress if the model
    does not end it.
    """
    _msg = f"end_interview requested for interview {session_id}"
    log.debug(_msg)
    return await submit_turn(
        db,
        user_id,
        session_id,
        END_UTTERANCE,
        llm_config,
        policy,
        generation_policy=generation_policy,
        expected_question_count=expected_question_count,
    )


def save_interview_record(db: Session, user_id: int, session_id: str) -> str:
    """Write the MockInterviewRecord for a completed session, at most once.

    Args:
        db (Session): The database session.
        user_id (int): The candidate.
        session_id (str): A completed interview session.

    Returns:
        str: The record id. An existing record's id is returned unchanged.

    Raises:
        RecordNotFoundError: If the session does not exist for this user.
        InterviewStateError: If the session is not completed.
        PersistenceError: If the write fails.

    Notes:
        1. A record already linked to the session, or already written for it, is
           returned as is.
        2. Otherwise build the record from the stored session: transcript as
           "Interviewer: ..." / "Candidate: ..." paragraphs, final score and
           feedback, job description and question count. The `{role, content}`
           messages are stored alongside so the transcript never needs re-parsing.
        3. Link the record to the session.

    """
    session = get_session(db, user_id, session_id)
    if session.status != InterviewStatus.COMPLETED:
        raise InterviewStateError("Only a completed interview can be saved.")

    existing = (
        db.query(MockInterviewRecord)
        .filter(
            MockInterviewRecord.session_id == session.id,
            MockInterviewRecord.user_id == user_id,
        )
        .first()
    )
    if existing is not None:
        record_id = existing.id
    else:
        record = MockInterviewRecord(
            user_id=user_id,
            data=MockInterviewRecordData(
                session_id=session.id,
                job_description=session.job_description,
                transcript=render_transcript(session.messages or []),
                final_score=session.last_score if session.last_score is not None else 0.0,
                final_feedback=session.last_feedback or "",
                question_count=session.question_count,
                messages=[
                    {"role": message["role"], "content": message["content"]}
                    for message in session.messages or []
                ],
            ),
        )
        record_id = append_record(db, record)

    if session.record_id != record_id:
        session.record_id = record_id
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            _msg = f"Record {record_id} saved but not linked to interview {session.id}: {e!s}"
            log.warning(_msg)

    _msg = f"Interview {session.id} saved as record {record_id}"
    log.debug(_msg)
    return record_id
