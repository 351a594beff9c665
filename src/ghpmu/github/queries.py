"""GraphQL query templates for the GitHub Issues and Projects APIs."""

# Shared selection for full issue reads
ISSUE_FRAGMENT = """
fragment IssueFields on Issue {
  id
  number
  title
  body
  state
  url
  author {
    login
  }
  repository {
    name
    owner {
      login
    }
  }
  assignees(first: 10) {
    nodes {
      login
    }
  }
  labels(first: 20) {
    nodes {
      name
      color
    }
  }
  milestone {
    title
  }
}
"""

# Query to get a user's project by number
GET_USER_PROJECT = """
query GetUserProject($owner: String!, $number: Int!) {
  user(login: $owner) {
    projectV2(number: $number) {
      id
      number
      title
      url
      closed
    }
  }
}
"""

# Query to get an organization's project by number
GET_ORG_PROJECT = """
query GetOrgProject($owner: String!, $number: Int!) {
  organization(login: $owner) {
    projectV2(number: $number) {
      id
      number
      title
      url
      closed
    }
  }
}
"""

# Query to get all field definitions of a project
GET_PROJECT_FIELDS = """
query GetProjectFields($projectId: ID!) {
  node(id: $projectId) {
    ... on ProjectV2 {
      fields(first: 50) {
        nodes {
          __typename
          ... on ProjectV2Field {
            id
            name
            dataType
          }
          ... on ProjectV2SingleSelectField {
            id
            name
            dataType
            options {
              id
              name
            }
          }
          ... on ProjectV2IterationField {
            id
            name
            dataType
          }
        }
      }
    }
  }
}
"""

# Query to get one page of project items with their field values
GET_PROJECT_ITEMS = """
query GetProjectItems($projectId: ID!, $first: Int!, $cursor: String) {
  node(id: $projectId) {
    ... on ProjectV2 {
      items(first: $first, after: $cursor) {
        pageInfo {
          hasNextPage
          endCursor
        }
        nodes {
          id
          content {
            __typename
            ... on Issue {
              id
              number
              title
              body
              state
              url
              repository {
                name
                owner {
                  login
                }
              }
              assignees(first: 10) {
                nodes {
                  login
                }
              }
              labels(first: 20) {
                nodes {
                  name
                }
              }
            }
          }
          fieldValues(first: 20) {
            nodes {
              __typename
              ... on ProjectV2ItemFieldSingleSelectValue {
                name
                field {
                  ... on ProjectV2FieldCommon {
                    name
                  }
                }
              }
              ... on ProjectV2ItemFieldTextValue {
                text
                field {
                  ... on ProjectV2FieldCommon {
                    name
                  }
                }
              }
              ... on ProjectV2ItemFieldNumberValue {
                number
                field {
                  ... on ProjectV2FieldCommon {
                    name
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""

# Query to get a single issue by repository and number
GET_ISSUE = (
    """
query GetIssue($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      ...IssueFields
    }
  }
}
"""
    + ISSUE_FRAGMENT
)

# Query to get the direct sub-issues of an issue
GET_SUB_ISSUES = """
query GetSubIssues($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      id
      subIssues(first: 50) {
        nodes {
          id
          number
          title
          state
          url
          repository {
            name
            owner {
              login
            }
          }
        }
      }
    }
  }
}
"""

# Query to get the parent of a sub-issue
GET_PARENT_ISSUE = """
query GetParentIssue($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      parent {
        id
        number
        title
        state
        url
        repository {
          name
          owner {
            login
          }
        }
      }
    }
  }
}
"""

# Query to get one page of repository issues filtered by state
GET_REPOSITORY_ISSUES = """
query GetRepositoryIssues(
  $owner: String!
  $name: String!
  $states: [IssueState!]
  $first: Int!
  $cursor: String
) {
  repository(owner: $owner, name: $name) {
    issues(first: $first, after: $cursor, states: $states) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        id
        number
        title
        body
        state
        url
        assignees(first: 10) {
          nodes {
            login
          }
        }
        labels(first: 20) {
          nodes {
            name
          }
        }
        milestone {
          title
        }
      }
    }
  }
}
"""

# Query to find the project items an issue already belongs to
GET_ISSUE_PROJECT_ITEMS = """
query GetIssueProjectItems($issueId: ID!) {
  node(id: $issueId) {
    ... on Issue {
      projectItems(first: 50) {
        nodes {
          id
          project {
            id
          }
        }
      }
    }
  }
}
"""

# Query to get issue comments
GET_ISSUE_COMMENTS = """
query GetIssueComments($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      comments(first: 100) {
        nodes {
          author {
            login
          }
          body
          createdAt
        }
      }
    }
  }
}
"""

# Query to get repository ID by owner/name
GET_REPOSITORY = """
query GetRepository($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    id
    nameWithOwner
  }
}
"""

# Query to get labels from a repository
GET_REPOSITORY_LABELS = """
query GetRepositoryLabels($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    labels(first: 100) {
      nodes {
        id
        name
      }
    }
  }
}
"""

# Query to get open milestones from a repository
GET_REPOSITORY_MILESTONES = """
query GetRepositoryMilestones($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    milestones(first: 100, states: OPEN) {
      nodes {
        id
        number
        title
      }
    }
  }
}
"""

# Query to get a user's node ID by login
GET_USER = """
query GetUser($login: String!) {
  user(login: $login) {
    id
  }
}
"""

# Mutation to add an issue to a project
ADD_ITEM_TO_PROJECT = """
mutation AddItemToProject($projectId: ID!, $contentId: ID!) {
  addProjectV2ItemById(
    input: {
      projectId: $projectId
      contentId: $contentId
    }
  ) {
    item {
      id
    }
  }
}
"""

# Mutation to update a project item's field value. The value shape depends
# on the field's data type: singleSelectOptionId, text or number.
UPDATE_ITEM_FIELD = """
mutation UpdateItemField(
  $projectId: ID!
  $itemId: ID!
  $fieldId: ID!
  $value: ProjectV2FieldValue!
) {
  updateProjectV2ItemFieldValue(
    input: {
      projectId: $projectId
      itemId: $itemId
      fieldId: $fieldId
      value: $value
    }
  ) {
    projectV2Item {
      id
    }
  }
}
"""

# Mutation to create a new issue
CREATE_ISSUE = (
    """
mutation CreateIssue($input: CreateIssueInput!) {
  createIssue(input: $input) {
    issue {
      ...IssueFields
    }
  }
}
"""
    + ISSUE_FRAGMENT
)

# Mutation to add labels to an issue
ADD_LABELS = """
mutation AddLabels($labelableId: ID!, $labelIds: [ID!]!) {
  addLabelsToLabelable(
    input: {
      labelableId: $labelableId
      labelIds: $labelIds
    }
  ) {
    clientMutationId
  }
}
"""

# Mutation to link a sub-issue to its parent
ADD_SUB_ISSUE = """
mutation AddSubIssue($issueId: ID!, $subIssueId: ID!) {
  addSubIssue(input: { issueId: $issueId, subIssueId: $subIssueId }) {
    issue {
      id
    }
    subIssue {
      id
    }
  }
}
"""

# Mutation to unlink a sub-issue from its parent
REMOVE_SUB_ISSUE = """
mutation RemoveSubIssue($issueId: ID!, $subIssueId: ID!) {
  removeSubIssue(input: { issueId: $issueId, subIssueId: $subIssueId }) {
    issue {
      id
    }
    subIssue {
      id
    }
  }
}
"""
