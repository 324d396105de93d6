import asyncio
import unittest
from types import SimpleNamespace

from openai import OpenAIError

from core.api.openai_client import OpenAITransport, StreamChunk
from core.request.builder import MediaPart, build_request, text
from exceptions.exceptions import TransportError
from runtime.models.result_models import RESUME_ANALYSIS_SCHEMA


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def delta(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class FakeProviderStream:
    """Async iterator shaped like the SDK's chat-completions stream.

    Items are events to yield, exceptions to raise, or asyncio.Event
    objects to wait on before moving to the next item.
    """

    def __init__(self, items):
        self.items = list(items)
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        while self.items:
            item = self.items.pop(0)
            if isinstance(item, asyncio.Event):
                await item.wait()
                continue
            if isinstance(item, BaseException):
                raise item
            return item
        raise StopAsyncIteration

    async def close(self):
        self.closed = True


class FakeCompletions:
    def __init__(self, results):
        self.results = list(results)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


class FakeImages:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def generate(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


class FakeClient:
    def __init__(self, results=(), image_result=None):
        self.completions = FakeCompletions(results)
        self.chat = SimpleNamespace(completions=self.completions)
        self.images = FakeImages(image_result)


class TestGenerate(unittest.IsolatedAsyncioTestCase):
    async def test_structured_request_carries_schema_and_thinking_budget(self):
        client = FakeClient(results=[completion('{"score": 1}')])
        transport = OpenAITransport(client=client)
        request = build_request(
            [text("Analyze this resume."), MediaPart(media_type="application/pdf", data="UEZE")],
            schema=RESUME_ANALYSIS_SCHEMA,
            reasoning_budget=512,
        )

        reply = await transport.generate(request, model="analysis-model")

        self.assertEqual(reply, '{"score": 1}')
        call = client.completions.calls[0]
        self.assertEqual(call["model"], "analysis-model")
        self.assertEqual(call["response_format"], RESUME_ANALYSIS_SCHEMA.to_response_format())
        self.assertEqual(
            call["extra_body"],
            {"extra_body": {"google": {"thinking_config": {"thinking_budget": 512}}}},
        )
        self.assertEqual(
            call["messages"],
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": "Analyze this resume."},
                        {
                            "type": "image_url",
                            "image_url": {"url": "data:application/pdf;base64,UEZE"},
                        },
                    ],
                }
            ],
        )

    async def test_plain_request_sends_no_optional_options(self):
        client = FakeClient(results=[completion(None)])
        transport = OpenAITransport(client=client)

        reply = await transport.generate(build_request([text("hi")]), model="m")

        self.assertEqual(reply, "")
        call = client.completions.calls[0]
        self.assertNotIn("response_format", call)
        self.assertNotIn("extra_body", call)

    async def test_provider_error_is_wrapped_and_chained(self):
        cause = OpenAIError("quota exceeded")
        transport = OpenAITransport(client=FakeClient(results=[cause]))

        with self.assertRaises(TransportError) as ctx:
            await transport.generate(build_request([text("hi")]), model="m")

        self.assertEqual(ctx.exception.operation, "generate")
        self.assertIs(ctx.exception.__cause__, cause)

    async def test_empty_choices_raise(self):
        transport = OpenAITransport(client=FakeClient(results=[SimpleNamespace(choices=[])]))

        with self.assertRaises(TransportError):
            await transport.generate(build_request([text("hi")]), model="m")


class TestStreamChat(unittest.IsolatedAsyncioTestCase):
    async def test_yields_chunks_and_closes_stream(self):
        stream = FakeProviderStream(
            [delta("Hel"), SimpleNamespace(choices=[]), delta(None), delta("lo")]
        )
        client = FakeClient(results=[stream])
        transport = OpenAITransport(client=client)

        chunks = [
            chunk
            async for chunk in transport.stream_chat(
                model="chat-model",
                system_instruction="Be brief.",
                messages=[{"role": "user", "content": "hi"}],
                reasoning_budget=64,
            )
        ]

        self.assertEqual(chunks, [StreamChunk(text="Hel"), StreamChunk(text=""), StreamChunk(text="lo")])
        self.assertTrue(stream.closed)
        call = client.completions.calls[0]
        self.assertTrue(call["stream"])
        self.assertEqual(
            call["messages"],
            [
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "hi"},
            ],
        )
        self.assertEqual(
            call["extra_body"]["extra_body"]["google"]["thinking_config"]["thinking_budget"], 64
        )

    async def test_early_close_releases_provider_stream(self):
        stream = FakeProviderStream([delta("A"), delta("B"), delta("C")])
        transport = OpenAITransport(client=FakeClient(results=[stream]))
        chunks = transport.stream_chat(model="m", system_instruction="s", messages=[])

        first = await chunks.__anext__()
        await chunks.aclose()

        self.assertEqual(first.text, "A")
        self.assertTrue(stream.closed)

    async def test_cancelled_consumer_releases_provider_stream(self):
        gate = asyncio.Event()
        stream = FakeProviderStream([delta("A"), gate, delta("B")])
        transport = OpenAITransport(client=FakeClient(results=[stream]))
        received = []

        async def consume():
            async for chunk in transport.stream_chat(model="m", system_instruction="s", messages=[]):
                received.append(chunk.text)

        task = asyncio.create_task(consume())
        while not received:
            await asyncio.sleep(0)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task

        self.assertEqual(received, ["A"])
        self.assertTrue(stream.closed)

    async def test_error_mid_stream_is_wrapped_and_stream_closed(self):
        cause = OpenAIError("connection reset")
        stream = FakeProviderStream([delta("partial"), cause])
        transport = OpenAITransport(client=FakeClient(results=[stream]))
        received = []

        with self.assertRaises(TransportError) as ctx:
            async for chunk in transport.stream_chat(model="m", system_instruction="s", messages=[]):
                received.append(chunk.text)

        self.assertEqual(received, ["partial"])
        self.assertEqual(ctx.exception.operation, "stream_chat")
        self.assertIs(ctx.exception.__cause__, cause)
        self.assertTrue(stream.closed)

    async def test_stream_that_cannot_start_is_wrapped(self):
        cause = OpenAIError("bad key")
        transport = OpenAITransport(client=FakeClient(results=[cause]))

        with self.assertRaises(TransportError) as ctx:
            async for _ in transport.stream_chat(model="m", system_instruction="s", messages=[]):
                pass

        self.assertIs(ctx.exception.__cause__, cause)


class TestGenerateImage(unittest.IsolatedAsyncioTestCase):
    async def test_returns_first_inline_image(self):
        result = SimpleNamespace(
            data=[SimpleNamespace(b64_json=None), SimpleNamespace(b64_json="aW1n")]
        )
        client = FakeClient(image_result=result)
        transport = OpenAITransport(client=client)

        media_type, data = await transport.generate_image("a cat", model="imagen-model")

        self.assertEqual((media_type, data), ("image/png", "aW1n"))
        self.assertEqual(
            client.images.calls[0],
            {"model": "imagen-model", "prompt": "a cat", "n": 1, "response_format": "b64_json"},
        )

    async def test_no_image_data_raises(self):
        for result in [SimpleNamespace(data=[]), SimpleNamespace(data=None)]:
            with self.subTest(data=result.data):
                transport = OpenAITransport(client=FakeClient(image_result=result))
                with self.assertRaises(TransportError) as ctx:
                    await transport.generate_image("a cat", model="m")
                self.assertEqual(ctx.exception.operation, "generate_image")

    async def test_provider_error_is_wrapped(self):
        cause = OpenAIError("model not found")
        transport = OpenAITransport(client=FakeClient(image_result=cause))

        with self.assertRaises(TransportError) as ctx:
            await transport.generate_image("a cat", model="m")

        self.assertIs(ctx.exception.__cause__, cause)


if __name__ == "__main__":
    unittest.main()
