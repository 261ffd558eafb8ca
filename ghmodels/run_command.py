"""The ``run`` command: send prompts to a model and stream its replies."""

from __future__ import annotations

import argparse
import io
import os
import stat
import sys
import time
from typing import Any, Optional, Sequence, TextIO

from .chat import PARAMETER_NAMES, Conversation, ModelParameters, validate_model_name
from .config import CommandConfig
from .messages import ChatChoice, ChatCompletionOptions, ChatMessageRole
from .models import ModelSummary, sort_models
from .prompt import PromptFile, get_chat_message_role, load_from_file, template_string
from .util import parse_template_variables, select_option

DESCRIPTION = (
    "Prompts the specified model with the given prompt.\n"
    "\n"
    "Use `gh models run` to run in interactive mode. It will provide a list of the current\n"
    "models and allow you to select the one you want to run an inference with. "
    "After you select the model\n"
    "you will be able to enter the prompt you want to run via the selected model.\n"
    "\n"
    "If you know which model you want to run inference with, you can run the request "
    "in a single command\n"
    "as `gh models run [model] [prompt]`\n"
    "\n"
    "When using prompt files, you can pass template variables using the `--var` flag:\n"
    "`gh models run --file prompt.yml --var name=Alice --var topic=AI`\n"
    "\n"
    "When running inference against an organization, pass the organization name "
    "using the `--org` flag:\n"
    '`gh models run --org my-org openai/gpt-4o-mini "What is AI?"`\n'
    "\n"
    "The return value will be the response to your prompt from the selected model."
)

EXAMPLES = (
    "examples:\n"
    '  gh models run openai/gpt-4o-mini "how many types of hyena are there?"\n'
    '  gh models run --org my-org openai/gpt-4o-mini "how many types of hyena are there?"\n'
    '  gh models run --file prompt.yml --var name=Alice --var topic="machine learning"\n'
)

_EXIT_COMMANDS = ("/bye", "/exit", "/quit")
_RESET_COMMANDS = ("/reset", "/clear")
_SET_PREFIX = "/set "
_SYSTEM_PROMPT_PREFIX = "/system-prompt "
_TOKEN_DELAY = 0.01

_HELP_TEXT = (
    "Commands:\n"
    "  /bye, /exit, /quit - Exit the chat\n"
    "  /parameters - Show current model parameters\n"
    "  /reset, /clear - Reset chat context\n"
    "  /set <name> <value> - Set a model parameter\n"
    "  /system-prompt <prompt> - Set the system prompt\n"
    "  /help - Show this help message\n"
)


class ExitChat(Exception):
    """Raised when the user asks to leave an interactive chat."""

    def __init__(self) -> None:
        super().__init__("exiting chat")


def _is_pipe(stream: Any) -> bool:
    """Tell whether ``stream`` delivers piped input.

    In-memory text streams count as piped input.
    """
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, ValueError):
        return isinstance(stream, io.StringIO)
    try:
        return stat.S_ISFIFO(os.fstat(fd).st_mode)
    except OSError:
        return False


class RunCommandHandler:
    """Carries out the steps of a model run for one set of arguments."""

    def __init__(
        self,
        config: CommandConfig,
        args: Sequence[str],
        stdin: Optional[TextIO] = None,
    ) -> None:
        self._config = config
        self._client = config.client
        self._args = list(args)
        self._stdin = stdin if stdin is not None else sys.stdin

    def _write(self, message: str) -> None:
        self._config.write_to_out(message)

    def load_models(self) -> list[ModelSummary]:
        """Fetch the available models, sorted."""
        models = list(self._client.list_models())
        sort_models(models)
        return models

    def get_model_name_from_args(self, models: Sequence[ModelSummary]) -> str:
        """Take the model from the arguments, or ask the user to choose one."""
        if self._args:
            model_name = self._args[0]
        else:
            options = [model.id for model in models if model.is_chat_model()]
            model_name = select_option(
                "Select a model:", options, self._stdin, self._config.out
            )
        return validate_model_name(model_name, models)

    def chat_with_user(
        self, conversation: Conversation, params: ModelParameters
    ) -> Conversation:
        """Read one line from the user and apply it to the conversation.

        Raises ExitChat when the user leaves and EOFError when input ends.
        """
        self._write(">>> ")
        flush = getattr(self._config.out, "flush", None)
        if flush is not None:
            flush()

        line = self._stdin.readline()
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        if not line.endswith("\n"):
            raise EOFError("end of input")

        prompt = line.strip()
        if not prompt:
            return conversation

        if not prompt.startswith("/"):
            conversation.add_message(ChatMessageRole.USER, prompt)
            return conversation

        if prompt in _EXIT_COMMANDS:
            raise ExitChat()
        if prompt == "/parameters":
            self._show_parameters(conversation, params)
        elif prompt in _RESET_COMMANDS:
            conversation.reset()
            self._write("Reset chat history\n")
        elif prompt.startswith(_SET_PREFIX):
            self._set_parameter(prompt, params)
        elif prompt.startswith(_SYSTEM_PROMPT_PREFIX):
            conversation.system_prompt = prompt.removeprefix(_SYSTEM_PROMPT_PREFIX).strip('"')
            self._write("Updated system prompt\n")
        elif prompt == "/help":
            self._write(_HELP_TEXT)
        else:
            self._write(f"Unknown command '{prompt}'. See /help for supported commands.\n")
        return conversation

    def _show_parameters(self, conversation: Conversation, params: ModelParameters) -> None:
        self._write("Current parameters:\n")
        for name in PARAMETER_NAMES:
            self._write(f"  {name}: {params.format_parameter(name)}\n")
        self._write("\n")
        self._write("System Prompt:\n")
        if conversation.system_prompt:
            self._write("  " + conversation.system_prompt + "\n")
        else:
            self._write("  <not set>\n")

    def _set_parameter(self, prompt: str, params: ModelParameters) -> None:
        parts = prompt.split(" ")
        if len(parts) != 3:
            self._write("Invalid /set syntax. Usage: /set <name> <value>\n")
            return
        _, name, value = parts
        try:
            params.set_parameter_by_name(name, value)
        except ValueError as err:
            self._write(f"{err}\n")
            return
        self._write(f"Set {name} to {value}\n")

    def _handle_choice(self, choice: ChatChoice) -> str:
        # Streamed responses carry their text in the delta, whole ones in the message.
        content = ""
        if choice.delta is not None and choice.delta.content is not None:
            content = choice.delta.content
        elif choice.message is not None and choice.message.content is not None:
            content = choice.message.content
        if content:
            self._write(content)
        if self._config.is_terminal_output:
            time.sleep(_TOKEN_DELAY)
        return content

    def stream_reply(self, request: ChatCompletionOptions, org: str = "") -> str:
        """Send the request, print the reply as it arrives and return its text."""
        response = self._client.get_chat_completion_stream(request, org)
        reader = response.reader
        parts: list[str] = []
        try:
            for completion in reader:
                for choice in completion.choices:
                    parts.append(self._handle_choice(choice))
        finally:
            reader.close()
        return "".join(parts)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser of the run command."""
    parser = argparse.ArgumentParser(
        prog="gh models run",
        usage="gh models run [model] [prompt] [flags]",
        description=DESCRIPTION,
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("args", nargs="*", metavar="[model] [prompt]")
    parser.add_argument("--file", default="", metavar="string",
                        help="Path to a .prompt.yml file.")
    parser.add_argument(
        "--var", action="append", default=None, metavar="stringArray",
        help="Template variables for prompt files "
             "(can be used multiple times: --var name=value)",
    )
    parser.add_argument("--max-tokens", default="", metavar="string",
                        help="Limit the maximum tokens for the model response.")
    parser.add_argument(
        "--temperature", default="", metavar="string",
        help="Controls randomness in the response, use lower to be more deterministic.",
    )
    parser.add_argument(
        "--top-p", default="", metavar="string",
        help="Controls text diversity by selecting the most probable words "
             "until a set probability is reached.",
    )
    parser.add_argument("--system-prompt", default="", metavar="string",
                        help="Prompt the system.")
    parser.add_argument(
        "--org", default="", metavar="string",
        help="Organization to attribute usage to "
             "(omitting will attribute usage to the current actor",
    )
    return parser


def _conversation_from_prompt_file(
    prompt_file: PromptFile,
    conversation: Conversation,
    initial_prompt: str,
    template_vars: dict[str, str],
) -> None:
    data: dict[str, Any] = {"input": initial_prompt}
    data.update(template_vars)
    for message in prompt_file.messages:
        content = template_string(message.content, data)
        role = get_chat_message_role(message.role)
        if role is ChatMessageRole.SYSTEM:
            conversation.system_prompt = content
        else:
            conversation.add_message(role, content)


def run_command(
    config: CommandConfig,
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[TextIO] = None,
) -> None:
    """Run inference with a model, once or as an interactive chat."""
    options = build_parser().parse_intermixed_args(list(argv) if argv is not None else [])
    stdin = stdin if stdin is not None else sys.stdin
    args = list(options.args)

    prompt_file: Optional[PromptFile] = None
    if options.file:
        prompt_file = load_from_file(options.file)
        if prompt_file.model and not args:
            args.insert(0, prompt_file.model)

    template_vars = parse_template_variables(options.var or [])

    handler = RunCommandHandler(config, args, stdin)
    models = handler.load_models()
    model_name = handler.get_model_name_from_args(models)

    interactive = True
    initial_prompt = ""
    if len(args) > 1:
        initial_prompt = " ".join(args[1:])
        interactive = False

    if _is_pipe(stdin):
        piped = stdin.read()
        if isinstance(piped, bytes):
            piped = piped.decode("utf-8")
        if piped:
            interactive = False
            piped = piped.strip()
            initial_prompt = f"{initial_prompt}\n{piped}" if initial_prompt else piped

    conversation = Conversation(system_prompt=options.system_prompt)
    if prompt_file is None:
        conversation.add_message(ChatMessageRole.USER, initial_prompt)
    else:
        interactive = False
        _conversation_from_prompt_file(prompt_file, conversation, initial_prompt, template_vars)

    params = ModelParameters()
    if prompt_file is not None:
        params.max_tokens = prompt_file.model_parameters.max_tokens
        params.temperature = prompt_file.model_parameters.temperature
        params.top_p = prompt_file.model_parameters.top_p
    params.populate(options.max_tokens, options.temperature, options.top_p)

    while True:
        if interactive:
            try:
                conversation = handler.chat_with_user(conversation, params)
            except (ExitChat, EOFError):
                break

        if prompt_file is not None:
            request = prompt_file.build_chat_completion_options(conversation.messages())
            request.model = model_name
        else:
            request = ChatCompletionOptions(messages=conversation.messages(), model=model_name)
        params.update_request(request)

        reply = handler.stream_reply(request, options.org)
        config.write_to_out("\n")
        conversation.add_message(ChatMessageRole.ASSISTANT, reply + "\n")

        if not interactive:
            break