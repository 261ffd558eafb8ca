# ghmodels

A command-line tool for working with hosted AI models. It lists the chat models
that are available, shows the details of one, and sends prompts to a model,
either one at a time or in an interactive chat.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Authentication

The tool needs a GitHub token for `github.com`. It looks at the `GH_TOKEN` and
`GITHUB_TOKEN` environment variables first, then asks the `gh` tool
(`gh auth token`). If no token is found, it prints a notice and uses an
unauthenticated client, which refuses every operation with a
"not authenticated" error.

## Usage

```
gh-models --help
gh-models help run
```

The commands are `list`, `run`, `view` and `help`. A command that fails prints
`Error: ...` on standard error and exits with status 1.

### List models

```
gh-models list
```

This prints the chat models as a table with `ID` and `DISPLAY NAME` columns,
sorted by publisher and name (case ignored). On a terminal a line saying how
many models are shown comes first; otherwise the columns are separated by tabs.
A value from the `ID` column can be passed as the model argument to the other
commands.

### View a model

```
gh-models view openai/gpt-4.1
```

This prints the display name, model name, publisher, summary, context limits,
rate-limit tier, tags, supported input and output types, supported languages,
licence, licence description, description, notes and evaluation of the model.
Empty fields are left out. The model name is matched without regard to case. If
you leave out the model, you are asked to pick one from a numbered list, by
number or by ID.

### Run a prompt

```
gh-models run openai/gpt-4o-mini "how many types of hyena are there?"
```

The reply is printed as it streams in. Text piped on standard input is added to
the prompt on a new line:

```
cat notes.txt | gh-models run openai/gpt-4o-mini "summarize this"
```

If you give no model, you are asked to pick one. If you give no prompt and pipe
nothing in, the tool starts an interactive chat. Inside the chat these commands
are available:

- `/bye`, `/exit`, `/quit`: leave the chat
- `/parameters`: show the current model parameters and system prompt
- `/reset`, `/clear`: reset the chat context
- `/set <name> <value>`: set `max-tokens`, `temperature` or `top-p`
- `/system-prompt <prompt>`: set the system prompt
- `/help`: show the list of commands

Options for `run`:

- `--file PATH`: load messages, model and parameters from a `.prompt.yml` file
- `--var name=value`: a template variable for the prompt file (can be repeated;
  keys must be unique)
- `--max-tokens`, `--temperature`, `--top-p`: model parameters, which override
  the ones given in a prompt file
- `--system-prompt`: the system prompt
- `--org NAME`: the organization to attribute usage to

Model names of the form `custom/<publisher>/<model>` are sent as given, without
checking them against the catalog.

### Prompt files

A prompt file is YAML:

```yaml
name: Summarizer
description: Summarizes input text
model: openai/gpt-4o-mini
modelParameters:
  temperature: 0.5
messages:
  - role: system
    content: You are a text summarizer.
  - role: user
    content: "Summarize this for {{audience}}: {{input}}"
```

`{{input}}` is replaced by the prompt given on the command line, followed by any
piped input. Other placeholders are filled in from `--var`; placeholders without
a value are left as they are. A prompt file always runs once, not as a chat.

For structured output, set `responseFormat` to `text`, `json_object` or
`json_schema`. With `json_schema`, `jsonSchema` must be a JSON string that holds
at least a `name` and a `schema` field.

## What it does not do

There are no commands to evaluate prompts or to generate tests for them. Prompt
files may hold `testData` and `evaluators` entries; they are read and written
back by `PromptFile`, but nothing runs them.

## Library use

The package can also be used from Python:

- `ghmodels.modelkey.parse_model_key` and `format_identifier` handle model
  identifiers such as `publisher/model` and `provider/publisher/model`.
- `ghmodels.prompt.load_from_file`, `parse_prompt`, `template_string` and
  `PromptFile.save_to_file` read, fill in and write prompt files.
- `ghmodels.client.AzureClient` lists models, fetches model details and sends
  chat completion requests; it raises `ApiError`, or `RateLimitError` with a
  `retry_after` time, when the service refuses a request. Passing
  `http_log_file` appends each chat request to that file.
- `ghmodels.sse.EventReader` reads JSON events from a server-sent events stream.
- `ghmodels.cli.main` runs the command line and returns the exit status.