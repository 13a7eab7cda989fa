"""Object model of Arazzo workflow descriptions.

Defines immutable Pydantic models for every element of a description:
criteria, actions, parameters, steps, workflows, components and the
document root. Element families with several shapes are discriminated
unions, so every consumer matches on a closed set of variants.
"""

from .actions import EndAction, FailureAction, GotoAction, RetryAction, SuccessAction
from .components import Components
from .criteria import Criterion, JsonPathCriterion, RegexCriterion, SimpleCriterion, XPathCriterion
from .document import Document, Info, SourceDescription
from .parameters import LocatedParameter, Parameter, PayloadReplacement, RequestBody
from .reusable import FailureActionReference, ParameterReference, ReusableObject, SuccessActionReference
from .steps import (
    InvocationStep,
    OperationIdStep,
    OperationPathStep,
    OperationStep,
    StaticStep,
    Step,
    WorkflowStep,
)
from .workflows import Workflow

__all__ = (
    'Components',
    'Criterion',
    'Document',
    'EndAction',
    'FailureAction',
    'FailureActionReference',
    'GotoAction',
    'Info',
    'InvocationStep',
    'JsonPathCriterion',
    'LocatedParameter',
    'OperationIdStep',
    'OperationPathStep',
    'OperationStep',
    'Parameter',
    'ParameterReference',
    'PayloadReplacement',
    'RegexCriterion',
    'RequestBody',
    'RetryAction',
    'ReusableObject',
    'SimpleCriterion',
    'SourceDescription',
    'StaticStep',
    'Step',
    'SuccessAction',
    'SuccessActionReference',
    'Workflow',
    'WorkflowStep',
    'XPathCriterion',
)
