"""FastAPI server for the companion chat and its memory."""

import logging
import threading
import time
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from companion import llm
from companion.conversation import ConversationManager
from companion.embedding import EmbeddingProvider
from companion.memory_config import MemoryConfig
from companion.memory_manager import MemoryManager
from companion.migration import migrate_history
from companion.summarizer import Summarizer
from companion.vector_store import VectorStore

logger = logging.getLogger(__name__)


# --- Request/Response Models ---

class TextRequest(BaseModel):
    text: str

class TextResponse(BaseModel):
    response: str
    action: str = "respond"  # "respond", "code", "call"

class MemoryStats(BaseModel):
    short_term: int
    long_term: int
    unsummarized: int

class ChatEntry(BaseModel):
    role: str
    content: str
    timestamp: int


def build_memory(
    config: MemoryConfig,
    embed_fn: Callable[[str], list[float]],
    complete_fn: Callable[..., str],
) -> MemoryManager:
    embedder = EmbeddingProvider.from_config(embed_fn, config)
    vector_store = VectorStore(config.vector_path, embedder, config)
    summarizer = Summarizer(complete_fn, config)
    return MemoryManager(vector_store, summarizer, config)


def create_app(
    config: MemoryConfig | None = None,
    chat_fn: Callable[[list[dict]], str] | None = None,
    embed_fn: Callable[[str], list[float]] | None = None,
    complete_fn: Callable[..., str] | None = None,
    migrate_delay: Callable[[float], None] = time.sleep,
) -> FastAPI:
    """Wire the memory core to its collaborators; defaults use Ollama."""
    config = config or MemoryConfig.from_env()
    uses_ollama = chat_fn is None
    chat_fn = chat_fn or llm.chat
    embed_fn = embed_fn or llm.embed
    complete_fn = complete_fn or llm.complete

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting companion server...")
        if uses_ollama:
            llm.configure(config.chat_model)
            llm.configure_embeddings(config.embedding_model)
            if not llm.check_available():
                logger.warning("Ollama not available! Make sure 'ollama serve' is running.")

        memory = build_memory(config, embed_fn, complete_fn)
        memory.load()
        # Off the event loop: the backfill sleeps between batches
        await run_in_threadpool(
            migrate_history,
            memory.vector_store, memory.summarizer, config, sleep=migrate_delay,
        )

        app.state.memory = memory
        app.state.conversation = ConversationManager(memory, chat_fn)
        app.state.uses_ollama = uses_ollama
        # Endpoints run in a thread pool; memory is handled one request at a time
        app.state.memory_lock = threading.Lock()

        logger.info("Server ready.")
        yield
        memory.save()
        logger.info("Server shutting down.")

    app = FastAPI(title="Companion Server", lifespan=lifespan)

    @app.get("/health")
    def health(request: Request):
        """Health check."""
        ollama_ok = llm.check_available() if request.app.state.uses_ollama else None
        return {
            "status": "ok",
            "ollama": ollama_ok,
            "timestamp": time.time(),
        }

    @app.post("/chat/text", response_model=TextResponse)
    def chat_text(req: TextRequest, request: Request):
        """Text chat: record the message, answer with memory in context."""
        logger.info("Text chat: '%s'", req.text[:80])
        with request.app.state.memory_lock:
            reply = request.app.state.conversation.respond(req.text)
        return TextResponse(response=reply.text, action=reply.action.value)

    @app.get("/memory/stats", response_model=MemoryStats)
    def memory_stats(request: Request):
        with request.app.state.memory_lock:
            return MemoryStats(**request.app.state.memory.get_stats())

    @app.get("/memory/recent", response_model=list[ChatEntry])
    def memory_recent(request: Request, limit: int = Query(20, gt=0)):
        with request.app.state.memory_lock:
            entries = request.app.state.memory.get_recent_chat(limit)
        return [ChatEntry(**e.model_dump()) for e in entries]

    @app.post("/memory/summarize", response_model=MemoryStats)
    def memory_summarize(request: Request):
        """Summarize the recent window now instead of waiting for the cadence."""
        memory = request.app.state.memory
        with request.app.state.memory_lock:
            memory.force_summarize()
            return MemoryStats(**memory.get_stats())

    return app


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    uvicorn.run(create_app(), host="0.0.0.0", port=8321)


if __name__ == "__main__":
    main()
