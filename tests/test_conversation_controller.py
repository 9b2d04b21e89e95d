from __future__ import annotations

import asyncio

import httpx

from voice_receptionist.config import DEFAULT_GREETING
from voice_receptionist.conversation import ConversationController
from voice_receptionist.models import ResponderError, ResponderReply, TurnRole
from voice_receptionist.responder import RemoteResponderClient
from voice_receptionist.voice.capture import SpeechCaptureAdapter
from voice_receptionist.voice.interfaces import RecognitionEvent, RecognitionResult
from voice_receptionist.voice.output import SpeechOutputAdapter


class StubResponder:
    def __init__(self, result=None) -> None:
        self.result = result or ResponderReply(reply="Hello")
        self.calls: list[tuple[str, list[dict[str, str]]]] = []
        self.release: asyncio.Event | None = None

    async def respond(self, prompt, history):
        self.calls.append((prompt, list(history)))
        if self.release is not None:
            await self.release.wait()
        return self.result


class RecordingSynthesizer:
    def __init__(self) -> None:
        self.spoken: list[str] = []
        self.cancelled = 0

    def speak(self, utterance) -> None:
        self.spoken.append(utterance.text)

    def cancel(self) -> None:
        self.cancelled += 1


def test_controller_seeds_greeting() -> None:
    controller = ConversationController(StubResponder())

    turns = controller.history.turns()
    assert len(turns) == 1
    assert turns[0].role == TurnRole.ASSISTANT
    assert turns[0].content == DEFAULT_GREETING


def test_blank_submit_is_ignored() -> None:
    async def _run() -> tuple[object, object, StubResponder, ConversationController]:
        responder = StubResponder()
        controller = ConversationController(responder, greeting=None)
        return controller.submit(""), controller.submit("   "), responder, controller

    empty, spaces, responder, controller = asyncio.run(_run())
    assert empty is None
    assert spaces is None
    assert responder.calls == []
    assert len(controller.history) == 0


def test_successful_reply_appends_one_assistant_turn() -> None:
    async def _run():
        responder = StubResponder(ResponderReply(reply="  Hello  "))
        controller = ConversationController(responder, greeting=None)
        assistant = await controller.ask("  I need a meeting room ")
        return responder, controller, assistant

    responder, controller, assistant = asyncio.run(_run())
    turns = controller.history.turns()
    assert [(turn.role, turn.content) for turn in turns] == [
        (TurnRole.USER, "I need a meeting room"),
        (TurnRole.ASSISTANT, "Hello"),
    ]
    assert assistant is turns[-1]
    assert responder.calls == [("I need a meeting room", [{"role": "user", "content": "I need a meeting room"}])]
    assert controller.in_flight is False
    assert controller.error is None


def test_second_submit_while_in_flight_has_no_effect() -> None:
    async def _run():
        responder = StubResponder()
        responder.release = asyncio.Event()
        controller = ConversationController(responder, greeting=None)

        first = controller.submit("first question")
        await asyncio.sleep(0)
        second = controller.submit("second question")
        turns_while_waiting = controller.history.turns()
        calls_while_waiting = len(responder.calls)

        responder.release.set()
        await first
        return second, turns_while_waiting, calls_while_waiting, controller

    second, turns_while_waiting, calls_while_waiting, controller = asyncio.run(_run())
    assert second is None
    assert [turn.content for turn in turns_while_waiting] == ["first question"]
    assert calls_while_waiting == 1
    assert [turn.content for turn in controller.history.turns()] == ["first question", "Hello"]


def test_history_stays_capped_across_many_turns() -> None:
    async def _run() -> ConversationController:
        controller = ConversationController(StubResponder(), greeting="Welcome")
        for index in range(10):
            await controller.ask(f"question {index}")
        return controller

    controller = asyncio.run(_run())
    contents = [turn.content for turn in controller.history.turns()]
    assert len(contents) == 12
    assert contents[0] == "question 4"
    assert contents[-2:] == ["question 9", "Hello"]
    created = [turn.created_at for turn in controller.history.turns()]
    assert created == sorted(created)


def test_outgoing_history_never_exceeds_cap() -> None:
    async def _run() -> StubResponder:
        responder = StubResponder()
        controller = ConversationController(responder)
        for index in range(8):
            await controller.ask(f"question {index}")
        return responder

    responder = asyncio.run(_run())
    for prompt, history in responder.calls:
        assert len(history) <= 12
        assert history[-1] == {"role": "user", "content": prompt}


def test_server_error_keeps_user_turn_and_surfaces_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "boom"})

    async def _run() -> ConversationController:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            responder = RemoteResponderClient("http://test/api/respond", client=client)
            controller = ConversationController(responder, greeting=None)
            await controller.ask("book a tour")
        return controller

    controller = asyncio.run(_run())
    turns = controller.history.turns()
    assert [(turn.role, turn.content) for turn in turns] == [(TurnRole.USER, "book a tour")]
    assert controller.error == "boom"
    assert controller.in_flight is False


def test_retry_after_failure_reuses_the_recorded_user_turn() -> None:
    async def _run():
        responder = StubResponder(ResponderError(message="Upstream model error (503)."))
        controller = ConversationController(responder, greeting=None)
        await controller.ask("book a tour")
        failed_error = controller.error
        responder.result = ResponderReply(reply="Sure, which day?")
        await controller.ask("book a tour")
        return failed_error, controller

    failed_error, controller = asyncio.run(_run())
    assert failed_error == "Upstream model error (503)."
    assert controller.error is None
    assert [turn.content for turn in controller.history.turns()] == ["book a tour", "Sure, which day?"]


def test_responder_exception_becomes_error_message() -> None:
    class ExplodingResponder:
        async def respond(self, prompt, history):
            raise ConnectionError("connection reset")

    async def _run() -> ConversationController:
        controller = ConversationController(ExplodingResponder(), greeting=None)
        await controller.ask("hello")
        return controller

    controller = asyncio.run(_run())
    assert controller.error == "connection reset"
    assert controller.in_flight is False
    assert len(controller.history) == 1


def test_blank_reply_is_reported_as_invalid() -> None:
    async def _run() -> ConversationController:
        controller = ConversationController(StubResponder(ResponderReply(reply="   ")), greeting=None)
        await controller.ask("hello")
        return controller

    controller = asyncio.run(_run())
    assert controller.error == "Invalid response from server."
    assert [turn.role for turn in controller.history.turns()] == [TurnRole.USER]


def test_final_transcript_and_same_tick_manual_submit_append_one_turn() -> None:
    async def _run():
        responder = StubResponder()
        controller = ConversationController(responder, greeting=None)
        capture = SpeechCaptureAdapter(recognizer=object(), sink=controller)

        capture.on_result(RecognitionEvent(result_index=0, results=[RecognitionResult("book a tour", True)]))
        controller.set_pending_input("book a tour")
        manual = controller.submit_pending()
        await controller.wait_for_turn()
        return manual, responder, controller

    manual, responder, controller = asyncio.run(_run())
    assert manual is None
    user_turns = [turn for turn in controller.history.turns() if turn.role == TurnRole.USER]
    assert [turn.content for turn in user_turns] == ["book a tour"]
    assert len(responder.calls) == 1


def test_submit_clears_draft_and_interim_transcript() -> None:
    async def _run():
        controller = ConversationController(StubResponder(), greeting=None)
        controller.show_interim("book a")
        controller.set_pending_input("book a tour for Tuesday")
        task = controller.submit_pending()
        during = controller.snapshot()
        await task
        return during, controller.snapshot()

    during, after = asyncio.run(_run())
    assert during.processing is True
    assert during.pending_input == ""
    assert during.interim_transcript == ""
    assert after.processing is False


def test_reply_is_spoken_only_after_first_interaction() -> None:
    async def _run():
        synthesizer = RecordingSynthesizer()
        output = SpeechOutputAdapter(synthesizer)
        controller = ConversationController(StubResponder(), speech_output=output, greeting=None)

        await controller.ask("first")
        spoken_before = list(synthesizer.spoken)
        output.mark_interaction()
        await controller.ask("second")
        return spoken_before, synthesizer.spoken

    spoken_before, spoken_after = asyncio.run(_run())
    assert spoken_before == []
    assert spoken_after == ["Hello"]


def test_subscribers_receive_snapshots() -> None:
    async def _run():
        controller = ConversationController(StubResponder(), greeting=None)
        views = []
        unsubscribe = controller.subscribe(views.append)
        await controller.ask("hi")
        unsubscribe()
        controller.set_pending_input("ignored")
        return views

    views = asyncio.run(_run())
    assert views[0].processing is True
    assert views[-1].processing is False
    assert [turn.content for turn in views[-1].turns] == ["hi", "Hello"]
    assert all(view.pending_input != "ignored" for view in views)
