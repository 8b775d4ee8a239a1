from geminirelay.relay.sink import RelayPhase, RelaySink
from helpers import RecordingWriter

DONE = "data: [DONE]\n\n"


class TestRelaySink:
    async def test_token_frame_format(self, writer):
        sink = RelaySink(writer)
        await sink.send_token("Hi")
        assert writer.frames == ['data: {"token":"Hi"}\n\n']
        assert sink.state.tokens_sent == 1

    async def test_non_ascii_token_kept_verbatim(self, writer):
        sink = RelaySink(writer)
        await sink.send_token("héllo")
        assert writer.frames == ['data: {"token":"héllo"}\n\n']

    async def test_safety_block_frame_is_marked(self, writer):
        sink = RelaySink(writer)
        await sink.send_safety_block()
        assert writer.frames == [
            'data: {"error":"Response blocked by safety filters","finishReason":"SAFETY"}\n\n'
        ]

    async def test_close_sends_single_marker(self, writer):
        sink = RelaySink(writer)
        await sink.send_token("a")
        await sink.send_done()
        await sink.send_done()
        await sink.close()
        await sink.close()

        assert writer.frames.count(DONE) == 1
        assert writer.frames[-1] == DONE
        assert writer.close_calls == 1
        assert sink.state.phase is RelayPhase.TERMINATED

    async def test_writes_after_close_are_noops(self, writer):
        sink = RelaySink(writer)
        await sink.close()
        assert await sink.send_token("late") is False
        assert await sink.send_error("late") is False
        assert writer.frames == [DONE]

    async def test_disconnected_writer_receives_nothing(self, writer):
        sink = RelaySink(writer)
        writer.disconnected = True
        await sink.send_token("x")
        await sink.close()

        assert writer.frames == []
        assert sink.state.done_sent
        assert writer.close_calls == 1

    async def test_failing_write_marks_disconnected(self):
        writer = RecordingWriter(fail_on_write=True)
        sink = RelaySink(writer)
        assert await sink.send_token("x") is False
        assert writer.disconnected
        assert not sink.is_open
        await sink.close()
        assert writer.close_calls == 1

    async def test_phase_transitions(self, writer):
        sink = RelaySink(writer)
        assert sink.state.phase is RelayPhase.OPEN
        sink.start_streaming()
        assert sink.state.phase is RelayPhase.STREAMING
        await sink.close()
        sink.start_streaming()
        assert sink.state.phase is RelayPhase.TERMINATED
