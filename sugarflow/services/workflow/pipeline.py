"""Ticket-to-pull-request workflow.

Start work: resolve assignee, assign, transition to in progress, create
the ticket branch. Submit for review: commit staged changes, push,
open a pull request and write its URL back to the ticket.

Steps run strictly in order; a failed step stops the steps after it and
nothing already done is rolled back. No step is retried. Failures are
caught here, logged and turned into notifications on the context, so
entry points never raise.
"""

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from sugarflow.adapters.base import (
    CodeHostAdapter,
    CodeHostError,
    IssueTrackerAdapter,
    IssueTrackerError,
)
from sugarflow.adapters.github import GitHubAdapter
from sugarflow.adapters.jira import JiraAdapter
from sugarflow.config import AppConfig
from sugarflow.models import ChangedFiles, Ticket
from sugarflow.services import docker
from sugarflow.services.git import (
    GitRunnerError,
    branch_name_from_ticket,
    commit_staged,
    create_tracking_branch,
    current_branch,
    diff_against_head,
    get_changed_files,
    push_branch,
    stage_file,
    unstage_file,
)
from sugarflow.services.workflow.context import WorkflowContext
from sugarflow.services.workflow.errors import (
    AssigneeResolutionFailed,
    AssignmentFailed,
    BranchCreationFailed,
    BranchLookupFailed,
    CommitFailed,
    ContainerFailed,
    MissingCredentials,
    NoActiveTicket,
    PullRequestFailed,
    PushFailed,
    TicketLookupFailed,
    TransitionFailed,
    WorkflowError,
    WritebackFailed,
)

SEARCH_FIELDS = ["summary", "description", "status"]
VERIFY_FIELDS = ["status", "assignee"]


class StartWorkState(str, Enum):
    IDLE = "idle"
    RESOLVING_ASSIGNEE = "resolving_assignee"
    ASSIGNING = "assigning"
    TRANSITIONING = "transitioning"
    BRANCH_CREATING = "branch_creating"
    ACTIVE = "active"


class SubmitStep(str, Enum):
    PRECONDITIONS = "preconditions"
    FETCHING_TICKET = "fetching_ticket"
    COMMITTING = "committing"
    READING_BRANCH = "reading_branch"
    PUSHING = "pushing"
    CREATING_PR = "creating_pr"
    WRITING_BACK = "writing_back"
    DONE = "done"


class StartWorkResult(BaseModel):
    """Outcome of start work; state is where the pipeline stopped."""

    ticket: str
    state: StartWorkState = StartWorkState.IDLE
    ok: bool = False
    branch_created: bool = False
    error_code: str | None = None
    error: str | None = None


class SubmitResult(BaseModel):
    """Outcome of submit for review; step is where the pipeline stopped."""

    ticket: str | None = None
    step: SubmitStep = SubmitStep.PRECONDITIONS
    ok: bool = False
    commit_message: str | None = None
    branch: str | None = None
    pr_url: str | None = None
    error_code: str | None = None
    error: str | None = None


class ActiveTicketView(BaseModel):
    """Payload of the in-progress panel section."""

    ticket: str
    message: str
    display_buttons: bool = False
    git_link: str | None = None


class TicketDetails(BaseModel):
    """Ticket as shown in the search panel."""

    key: str
    summary: str
    description: str | None = None
    status: str
    url: str | None = None


def commit_message_for(ticket: Ticket) -> str:
    """Commit message and PR title: "<key>: <summary>"."""
    return f"{ticket.key}: {ticket.summary}"


def pull_request_body(ticket: Ticket, ticket_url: str) -> str:
    return f"Pull request for {ticket.key}: {ticket.summary}\n\nJira Ticket: [{ticket.key}]({ticket_url})"


class WorkflowPipeline:
    """Orchestrates the issue tracker, git and the code host for one workspace.

    Adapters may be injected; otherwise they are built per operation from
    config with freshly resolved credentials.
    """

    def __init__(
        self,
        config: AppConfig,
        repo_dir: Path | None = None,
        tracker: IssueTrackerAdapter | None = None,
        code_host: CodeHostAdapter | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._repo_dir = Path(repo_dir) if repo_dir is not None else config.workspace_path
        self._tracker = tracker
        self._code_host = code_host
        self._log = log or logging.getLogger("sugarflow.workflow")

    @property
    def repo_dir(self) -> Path:
        return self._repo_dir

    def _get_tracker(self) -> IssueTrackerAdapter:
        if self._tracker is not None:
            return self._tracker
        jira = self._config.jira
        token = self._config.jira_token_resolved
        if not token:
            raise MissingCredentials('Jira API token is not set. Run "sugarflow set-token".')
        if not jira.domain:
            raise MissingCredentials("Jira domain is not set (jira.domain in config.yaml).")
        return JiraAdapter(jira.domain, jira.username, token)

    def _get_code_host(self) -> CodeHostAdapter:
        if self._code_host is not None:
            return self._code_host
        token = self._config.github_token_resolved
        if not token:
            raise MissingCredentials('GitHub token is not set. Run "sugarflow set-github-token".')
        return GitHubAdapter(token=token, api_url=self._config.github.api_url)

    # -- ticket lookup -------------------------------------------------------

    def search_ticket(self, ctx: WorkflowContext, key: str) -> TicketDetails | None:
        """Fetch summary, description and status; None on any failure."""
        key = (key or "").strip()
        try:
            tracker = self._get_tracker()
            ticket = tracker.get_issue(key, SEARCH_FIELDS)
        except (WorkflowError, IssueTrackerError) as e:
            self._log.warning("Ticket lookup for %s failed: %s", key, e)
            ctx.error(f"Ticket {key} not found.")
            return None
        return TicketDetails(
            key=ticket.key,
            summary=ticket.summary,
            description=ticket.description,
            status=ticket.status,
            url=tracker.browse_url(ticket.key),
        )

    def verify_in_progress_ticket(self, ctx: WorkflowContext, key: str) -> bool:
        """True only if the ticket is in progress and assigned to ctx.username."""
        try:
            ticket = self._get_tracker().get_issue(key, VERIFY_FIELDS)
        except (WorkflowError, IssueTrackerError) as e:
            self._log.warning("Verifying ticket %s failed: %s", key, e)
            ctx.error(f"Failed to verify ticket {key} status.")
            return False
        in_progress = ticket.status == self._config.jira.in_progress_status
        assigned_to_user = ticket.assignee_email is not None and ticket.assignee_email == ctx.username
        return in_progress and assigned_to_user

    def get_git_link(self, key: str) -> str | None:
        """PR URL stored on the ticket, or None when unset or unreadable."""
        try:
            value = self._get_tracker().get_field(key, self._config.jira.git_link_field)
        except (WorkflowError, IssueTrackerError) as e:
            self._log.warning("Reading git link of %s failed: %s", key, e)
            return None
        return str(value) if value else None

    def describe_active_ticket(self, ctx: WorkflowContext) -> ActiveTicketView | None:
        """Build the in-progress view, or None when no ticket is active."""
        key = ctx.active_ticket
        if not key:
            self._log.debug("No in-progress ticket")
            return None
        display_buttons = self.verify_in_progress_ticket(ctx, key)
        git_link = self.get_git_link(key)
        if display_buttons:
            message = f"You have {key} in progress."
        else:
            message = f"You have {key} in progress, but it does not meet the criteria."
        return ActiveTicketView(ticket=key, message=message, display_buttons=display_buttons, git_link=git_link)

    # -- start work ----------------------------------------------------------

    def _start_transition_id(self, tracker: IssueTrackerAdapter, key: str) -> str:
        jira = self._config.jira
        transition_id = tracker.find_transition_id(key, jira.start_transition) if jira.start_transition else None
        if transition_id is None:
            if not jira.fallback_transition_id:
                raise TransitionFailed(
                    f'Ticket {key} has no "{jira.start_transition}" transition.'
                )
            self._log.info(
                "No %r transition on %s, using fallback id %s",
                jira.start_transition,
                key,
                jira.fallback_transition_id,
            )
            transition_id = jira.fallback_transition_id
        return transition_id

    def start_work(self, ctx: WorkflowContext, key: str) -> StartWorkResult:
        """Assign the ticket to ctx.username, move it to in progress and branch off.

        Steps 1-3 are hard gates. The active ticket is set once the
        transition succeeded. Branch creation failure is reported but does
        not undo the started work: the result stays ok and ACTIVE with
        branch_created False.
        """
        key = (key or "").strip()
        result = StartWorkResult(ticket=key)
        username = ctx.username
        try:
            tracker = self._get_tracker()

            result.state = StartWorkState.RESOLVING_ASSIGNEE
            try:
                account_id = tracker.find_user_by_email(username)
            except IssueTrackerError as e:
                self._log.warning("Resolving account of %s failed: %s", username, e)
                raise AssigneeResolutionFailed(f"Failed to find account ID for user {username}.") from e

            result.state = StartWorkState.ASSIGNING
            try:
                tracker.assign_issue(key, account_id)
            except IssueTrackerError as e:
                self._log.warning("Assigning %s failed: %s", key, e)
                raise AssignmentFailed(f"Failed to assign ticket {key} to yourself.") from e
            ctx.info(f"Assigned ticket {key} to {username}.")

            result.state = StartWorkState.TRANSITIONING
            try:
                tracker.transition_issue(key, self._start_transition_id(tracker, key))
            except IssueTrackerError as e:
                self._log.warning("Transitioning %s failed: %s", key, e)
                raise TransitionFailed(f'Failed to transition ticket {key} to "In Progress".') from e
            ctx.info(f'Ticket {key} transitioned to "In Progress".')
        except WorkflowError as e:
            result.error_code = e.code
            result.error = str(e)
            ctx.error(str(e))
            return result

        ctx.active_ticket = key
        result.ok = True

        result.state = StartWorkState.BRANCH_CREATING
        upstream = self._config.git.upstream
        try:
            try:
                branch = branch_name_from_ticket(key)
                create_tracking_branch(branch, upstream, repo_dir=self._repo_dir, log=self._log)
            except (ValueError, GitRunnerError) as e:
                raise BranchCreationFailed(f"Failed to create branch {key}: {e}") from e
            result.branch_created = True
            ctx.info(f"Created branch {branch} tracking {upstream}")
        except BranchCreationFailed as e:
            result.error_code = e.code
            result.error = str(e)
            ctx.error(str(e))

        result.state = StartWorkState.ACTIVE
        return result

    # -- submit for review ---------------------------------------------------

    def submit_for_review(self, ctx: WorkflowContext) -> SubmitResult:
        """Commit staged changes, push, open a PR and store its URL on the ticket.

        Every step is a hard gate: the code host is never called unless the
        push succeeded, and the ticket is never updated without a PR URL.
        """
        result = SubmitResult(ticket=ctx.active_ticket)
        github = self._config.github
        try:
            if not result.ticket:
                raise NoActiveTicket("No active ticket in progress.")
            key = result.ticket
            tracker = self._get_tracker()
            code_host = self._get_code_host()

            result.step = SubmitStep.FETCHING_TICKET
            try:
                ticket = tracker.get_issue(key, SEARCH_FIELDS)
            except IssueTrackerError as e:
                self._log.warning("Fetching %s failed: %s", key, e)
                raise TicketLookupFailed(f"Failed to retrieve ticket details for {key}.") from e
            message = commit_message_for(ticket)
            result.commit_message = message

            result.step = SubmitStep.COMMITTING
            try:
                commit_staged(message, repo_dir=self._repo_dir, log=self._log)
            except GitRunnerError as e:
                raise CommitFailed(f"Failed to create commit: {e}") from e
            ctx.info(f'Created commit with message: "{message}"')

            result.step = SubmitStep.READING_BRANCH
            try:
                branch = current_branch(repo_dir=self._repo_dir, log=self._log)
            except GitRunnerError as e:
                raise BranchLookupFailed(f"Failed to retrieve branch name: {e}") from e
            result.branch = branch

            result.step = SubmitStep.PUSHING
            try:
                push_branch(branch, remote=self._config.git.remote, repo_dir=self._repo_dir, log=self._log)
            except GitRunnerError as e:
                raise PushFailed(f"Failed to push to branch {branch}: {e}") from e
            ctx.info(f"Pushed to branch {branch}")

            result.step = SubmitStep.CREATING_PR
            self._log.info("Creating pull request: title=%r head=%s base=%s", message, branch, github.base_branch)
            try:
                pr = code_host.create_pr(
                    github.repository,
                    title=message,
                    body=pull_request_body(ticket, tracker.browse_url(ticket.key)),
                    head=branch,
                    base=github.base_branch,
                )
            except CodeHostError as e:
                raise PullRequestFailed(f"GitHub API error: {e}") from e
            if not pr.html_url:
                raise PullRequestFailed("GitHub API error: response has no pull request URL")
            result.pr_url = pr.html_url
            ctx.info(f"Pull Request created: {pr.html_url}")

            result.step = SubmitStep.WRITING_BACK
            try:
                tracker.set_custom_field(ticket.key, self._config.jira.git_link_field, pr.html_url)
            except IssueTrackerError as e:
                self._log.warning("Writing PR URL to %s failed: %s", ticket.key, e)
                raise WritebackFailed(f"Failed to save PR URL to Jira ticket {ticket.key}.") from e
            ctx.info('PR URL saved to Jira in field "Git link 1".')
        except WorkflowError as e:
            result.error_code = e.code
            result.error = str(e)
            ctx.error(str(e))
            return result

        result.step = SubmitStep.DONE
        result.ok = True
        return result

    def create_build(self, ctx: WorkflowContext) -> None:
        ctx.info("Build initiated.")

    # -- working tree --------------------------------------------------------

    def changed_files(self) -> ChangedFiles:
        """Staged and unstaged paths; empty when git status fails."""
        try:
            return get_changed_files(repo_dir=self._repo_dir, log=self._log)
        except GitRunnerError as e:
            self._log.error("Error getting changed files: %s", e)
            return ChangedFiles()

    def stage(self, ctx: WorkflowContext, path: str) -> bool:
        try:
            stage_file(path, repo_dir=self._repo_dir, log=self._log)
        except GitRunnerError as e:
            ctx.error(f"Failed to stage file {path}: {e}")
            return False
        ctx.info(f"Staged file {path}")
        return True

    def unstage(self, ctx: WorkflowContext, path: str) -> bool:
        try:
            unstage_file(path, repo_dir=self._repo_dir, log=self._log)
        except GitRunnerError as e:
            ctx.error(f"Failed to unstage file {path}: {e}")
            return False
        ctx.info(f"Unstaged file {path}")
        return True

    def view_changes(self, ctx: WorkflowContext, path: str) -> str | None:
        """Unified diff of path against HEAD, or None if HEAD has no such file."""
        try:
            return diff_against_head(path, repo_dir=self._repo_dir, log=self._log)
        except (GitRunnerError, OSError) as e:
            ctx.error(f"Failed to retrieve previous version for diff: {e}")
            return None

    # -- containers ----------------------------------------------------------

    def build_dev_image(self, ctx: WorkflowContext) -> bool:
        cfg = self._config.docker
        dockerfile = Path(cfg.dockerfile)
        if not dockerfile.is_absolute():
            dockerfile = self._repo_dir / dockerfile
        try:
            docker.build_image(dockerfile, cfg.image, timeout=cfg.timeout, log=self._log)
        except docker.DockerError as e:
            ctx.error(f"Failed to build Docker image: {e}")
            return False
        ctx.info(f"Docker image '{cfg.image}' built successfully.")
        return True

    def run_dev_container(self, ctx: WorkflowContext, version: str | None = None) -> bool:
        """Run the dev image in a container named after the active ticket."""
        cfg = self._config.docker
        version = version or cfg.default_version
        try:
            name = ctx.active_ticket
            if not name:
                raise NoActiveTicket(
                    "No active ticket in progress. Please start a ticket before running the container."
                )
            try:
                docker.run_container(
                    name,
                    self._repo_dir,
                    cfg.image,
                    cfg.ports,
                    cfg.setup_command.format(version=version),
                    timeout=cfg.timeout,
                    log=self._log,
                )
            except docker.DockerError as e:
                raise ContainerFailed(f"Failed to start or configure the Docker container: {e}") from e
        except WorkflowError as e:
            ctx.error(str(e))
            return False
        ctx.info(f"Container '{name}' is now running and fully configured.")
        return True

